"""Heuristic token security scanning."""
from .scanner import TokenScanner, risk_level_for, score_token
from .config import TokenRiskConfig, get_token_risk_config
from .types import RiskFactor, RiskLevel, TokenBasicInfo, TokenSecurityReport

__all__ = [
    "TokenScanner",
    "score_token",
    "risk_level_for",
    "TokenRiskConfig",
    "get_token_risk_config",
    "RiskFactor",
    "RiskLevel",
    "TokenBasicInfo",
    "TokenSecurityReport",
]
