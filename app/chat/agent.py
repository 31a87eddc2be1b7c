from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.chat.contracts import LLMAgentResponse
from app.config import get_settings
from chain.wallet import SeiWallet, get_wallet
from llm.client import LLMClient, LLMUnavailableError, get_llm_client
from llm.prompts import build_agent_prompt

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

# (keywords, suggestions); every matching group contributes
_SUGGESTION_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (
        ("portfolio", "balance", "assets"),
        ("📊 Get detailed portfolio analysis", "⚖️ Get rebalancing recommendations", "📈 Check performance metrics"),
    ),
    (
        ("trade", "swap", "buy"),
        ("🎯 Get optimal trading strategy", "📊 View market analysis", "⚠️ Check risk assessment"),
    ),
    (
        ("stake", "yield", "farm"),
        ("🏦 Compare protocol APYs", "💰 Calculate expected returns", "🔒 Check security scores"),
    ),
    (
        ("market", "trend", "analysis"),
        ("📈 View real-time charts", "🔥 Check trending tokens", "🆕 See new launches"),
    ),
]
_DEFAULT_SUGGESTIONS = ("🚀 Explore DeFi opportunities", "📊 Check portfolio performance", "💡 Get trading insights")


def advanced_suggestions(message: str) -> list[str]:
    normalized = message.lower()
    suggestions: list[str] = []
    for keywords, items in _SUGGESTION_RULES:
        if any(k in normalized for k in keywords):
            suggestions.extend(items)
    if not suggestions:
        suggestions.extend(_DEFAULT_SUGGESTIONS)
    return suggestions[:MAX_SUGGESTIONS]


class SeiLLMAgent:
    """
    Free-form DeFi assistant backed by the chat model, primed with live wallet state.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[], LLMClient] | None = None,
        wallet_provider: Callable[[], SeiWallet] | None = None,
    ) -> None:
        self.settings = get_settings()
        self._client_factory = client_factory or (lambda: get_llm_client(model=self.settings.agent_model))
        self._wallet_provider = wallet_provider

    def wallet_info(self) -> str:
        try:
            wallet = (self._wallet_provider or get_wallet)()
            sei = wallet.get_sei_balance()
            usdc = wallet.get_usdc_balance()
        except Exception as e:
            return f"WALLET INFO: Unable to fetch ({e})"
        return (
            "WALLET STATUS:\n"
            f"- SEI Balance: {sei['sei']} SEI (${sei['usd']:.2f})\n"
            f"- USDC Balance: {usdc['balance']} USDC\n"
            f"- Wallet Address: {wallet.address}\n"
            f"- Network: {wallet.network}"
        )

    def process_message(self, message: str) -> LLMAgentResponse | None:
        """
        Returns None when no model is configured or the provider call fails.
        """
        if not self.settings.llm_available:
            return None

        wallet_info = self.wallet_info()
        prompt = build_agent_prompt(message, wallet_info=wallet_info, dex_name=self.settings.dex_name)
        try:
            text = self._client_factory().chat(prompt=prompt)
        except LLMUnavailableError as e:
            logger.warning("LLM agent unavailable: %s", e)
            return None

        return LLMAgentResponse(
            message=text,
            success=True,
            confidence=0.95,
            suggestions=advanced_suggestions(message),
            data={
                "walletInfo": wallet_info,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
