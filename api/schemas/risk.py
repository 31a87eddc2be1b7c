from __future__ import annotations

from pydantic import BaseModel


class RiskRequest(BaseModel):
    tokenAddress: str | None = None
    network: str | None = None


class RiskSummary(BaseModel):
    address: str
    riskLevel: str
    securityScore: int
    warnings: list[str]
