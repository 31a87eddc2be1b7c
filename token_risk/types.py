"""Data types for token security scanning."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    """Return current UTC time."""
    return datetime.now(timezone.utc)


class RiskLevel(Enum):
    """Risk level derived from the security score."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass
class RiskFactor:
    """One scoring adjustment and the reason for it."""
    name: str
    impact: int
    detail: str


@dataclass
class TokenBasicInfo:
    """On-chain token metadata. Fields are None when unreadable."""
    address: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    total_supply: Optional[int] = None
    has_code: bool = False

    @property
    def metadata_complete(self) -> bool:
        return self.name is not None and self.symbol is not None and self.decimals is not None


@dataclass
class TokenSecurityReport:
    """Result of a token scan."""
    basic_info: TokenBasicInfo
    security_score: int  # 0-100
    risk_level: RiskLevel
    recommendation: str
    factors: List[RiskFactor] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    is_known_safe: bool = False
    network: str = "mainnet"
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def address(self) -> str:
        return self.basic_info.address

    def to_summary(self) -> Dict[str, Any]:
        """Compact shape served by the risk endpoint."""
        return {
            "address": self.address,
            "riskLevel": self.risk_level.value,
            "securityScore": self.security_score,
            "warnings": list(self.warnings),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        info = self.basic_info
        return {
            **self.to_summary(),
            "network": self.network,
            "basicInfo": {
                "name": info.name,
                "symbol": info.symbol,
                "decimals": info.decimals,
                "totalSupply": str(info.total_supply) if info.total_supply is not None else None,
                "hasCode": info.has_code,
            },
            "factors": [
                {"name": f.name, "impact": f.impact, "detail": f.detail} for f in self.factors
            ],
            "recommendation": self.recommendation,
            "isKnownSafe": self.is_known_safe,
            "timestamp": self.timestamp.isoformat(),
        }
