"""Configuration for token security scanning."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet

from app.config import get_settings


@dataclass
class ScoreWeights:
    """Score adjustments applied to the base score."""
    base: int = 50
    has_code: int = 20
    no_code: int = -10
    metadata_complete: int = 10
    supply_readable: int = 15
    supply_unreadable: int = -5
    known_safe_score: int = 95


@dataclass
class RiskThresholds:
    """Score thresholds for risk levels."""
    low_min: int = 70     # score >= 70 -> LOW
    medium_min: int = 40  # 40 <= score < 70 -> MEDIUM
    # score < 40 -> HIGH


@dataclass
class TokenRiskConfig:
    """Main configuration for token scanning."""
    weights: ScoreWeights = field(default_factory=ScoreWeights)
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    known_safe_tokens: FrozenSet[str] = frozenset()

    def is_known_safe(self, address: str) -> bool:
        return address.lower() in self.known_safe_tokens

    @classmethod
    def from_env(cls) -> "TokenRiskConfig":
        """Load configuration from environment variables and settings."""
        s = get_settings()

        thresholds = RiskThresholds(
            low_min=int(os.getenv("TOKEN_RISK_LOW_MIN", "70")),
            medium_min=int(os.getenv("TOKEN_RISK_MEDIUM_MIN", "40")),
        )

        known = {
            s.usdc_mainnet,
            s.usdc_testnet,
            s.wsei_mainnet,
            s.wsei_testnet,
        }
        extra = os.getenv("TOKEN_RISK_KNOWN_SAFE", "")
        known.update(a.strip() for a in extra.split(",") if a.strip())

        return cls(
            thresholds=thresholds,
            known_safe_tokens=frozenset(a.lower() for a in known if a),
        )


@lru_cache(maxsize=1)
def get_token_risk_config() -> TokenRiskConfig:
    """Get cached token risk configuration."""
    return TokenRiskConfig.from_env()
