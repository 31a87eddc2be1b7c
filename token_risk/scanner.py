from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple, TypeVar

from web3 import Web3

from chain import rpc
from token_risk.config import TokenRiskConfig, get_token_risk_config
from token_risk.types import (
    RiskFactor,
    RiskLevel,
    TokenBasicInfo,
    TokenSecurityReport,
)
from tools.tool_runner import run_tool

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECOMMENDATIONS = {
    RiskLevel.LOW: "Token shows healthy on-chain fundamentals. Still do your own research before trading.",
    RiskLevel.MEDIUM: "Some checks could not be confirmed. Trade small amounts and verify the project first.",
    RiskLevel.HIGH: "Multiple red flags detected. Avoid interacting with this token.",
}


class TokenScanner:
    def __init__(self, config: TokenRiskConfig | None = None) -> None:
        self.config = config or get_token_risk_config()

    def analyze(self, token_address: str, *, network: str = "mainnet") -> TokenSecurityReport:
        """
        Scan a token contract. Raises Web3RPCError when the contract code cannot be read.
        """
        address = Web3.to_checksum_address(token_address)
        info = self._basic_info(network, address)
        known_safe = self.config.is_known_safe(address)

        score, factors = score_token(info, known_safe=known_safe, config=self.config)
        level = risk_level_for(score, config=self.config)

        logger.info("token scan address=%s score=%s level=%s", address, score, level.value)
        return TokenSecurityReport(
            basic_info=info,
            security_score=score,
            risk_level=level,
            recommendation=RECOMMENDATIONS[level],
            factors=factors,
            warnings=[f.detail for f in factors if f.impact < 0],
            is_known_safe=known_safe,
            network=network,
        )

    def _basic_info(self, network: str, address: str) -> TokenBasicInfo:
        code = run_tool(
            tool_name="web3.eth_getCode",
            request={"network": network, "address": address},
            fn=lambda: rpc.get_code(network, address),
        )
        info = TokenBasicInfo(address=address, has_code=len(code) > 0)
        if not info.has_code:
            return info

        info.name = _optional(lambda: rpc.erc20_name(network, address))
        info.symbol = _optional(lambda: rpc.erc20_symbol(network, address))
        info.decimals = _optional(lambda: rpc.erc20_decimals(network, address))
        info.total_supply = _optional(lambda: rpc.erc20_total_supply(network, address))
        return info


def _optional(fn: Callable[[], T]) -> Optional[T]:
    try:
        return fn()
    except rpc.Web3RPCError as exc:
        logger.debug("token metadata read failed: %s", exc)
        return None


def score_token(
    info: TokenBasicInfo,
    *,
    known_safe: bool = False,
    config: TokenRiskConfig | None = None,
) -> Tuple[int, List[RiskFactor]]:
    """
    Heuristic 0-100 security score with the factors that produced it.
    """
    config = config or TokenRiskConfig()
    w = config.weights

    if known_safe:
        return w.known_safe_score, [
            RiskFactor("known_safe", w.known_safe_score - w.base, "Token is on the known-safe list")
        ]

    factors: List[RiskFactor] = []
    if info.has_code:
        factors.append(RiskFactor("contract_code", w.has_code, "Contract code is deployed"))
    else:
        factors.append(RiskFactor("contract_code", w.no_code, "No contract code at this address"))

    if info.metadata_complete:
        factors.append(RiskFactor("metadata", w.metadata_complete, "Name, symbol and decimals are readable"))

    if info.total_supply is not None:
        factors.append(RiskFactor("total_supply", w.supply_readable, "totalSupply is readable"))
    else:
        factors.append(RiskFactor("total_supply", w.supply_unreadable, "totalSupply could not be read"))

    score = w.base + sum(f.impact for f in factors)
    return max(0, min(100, score)), factors


def risk_level_for(score: int, *, config: TokenRiskConfig | None = None) -> RiskLevel:
    t = (config or TokenRiskConfig()).thresholds
    if score >= t.low_min:
        return RiskLevel.LOW
    if score >= t.medium_min:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
