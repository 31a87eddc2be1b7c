from __future__ import annotations

import re
from dataclasses import dataclass, field

from app.chat.contracts import ChatResponse, IntentType

# messages carrying an amount or an address are actionable and skip the canned replies
_ACTIONABLE_RE = re.compile(r"\d|0x[a-fA-F0-9]{40}")


@dataclass(frozen=True)
class SmartResponse:
    pattern: re.Pattern
    message: str
    intent: IntentType = IntentType.CONVERSATION
    confidence: float = 0.9
    suggestions: list[str] = field(default_factory=list)


SMART_RESPONSES: list[SmartResponse] = [
    SmartResponse(
        pattern=re.compile(r"^(hi|hello|hey|greetings|good\s+(morning|afternoon|evening))"),
        message=(
            "👋 Hello! I'm Seilor 0, your AI DeFi assistant on the Sei Network. I can help you with:\n\n"
            "💱 Token swapping\n"
            "💸 SEI and USDC transfers\n"
            "🥩 Staking and lending previews\n"
            "🔍 Token security scanning\n"
            "🚀 Token creation\n"
            "📝 A personal todo list\n\n"
            "What would you like to explore today?"
        ),
        suggestions=["Check my balance", "Scan a token", "Swap 10 SEI to USDC", "List todos"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(help|what\s+can\s+you\s+do|how\s+does\s+this\s+work|guide|tutorial)"),
        message=(
            "🚀 **Seilor 0 - Your DeFi AI Assistant**\n\n"
            "**💎 DeFi Operations**\n"
            "• \"Swap 10 SEI to USDC\" gives a quote, then asks you to confirm\n"
            "• \"Send 0.1 SEI to 0x...\" previews the transfer before sending\n"
            "• \"Stake 50 SEI\" previews staking\n\n"
            "**🛡️ Security**\n"
            "• Paste a token address to get a 0-100 safety score\n\n"
            "**👛 Wallet Watch**\n"
            "• \"Last 10 trades 0x... mainnet\" or \"Portfolio 0x... testnet\"\n\n"
            "**🚀 Tokens**\n"
            "• \"Create a token called BlueFox\""
        ),
        confidence=0.95,
        suggestions=["Check my balance", "Scan a token", "Create a token", "Swap tokens"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(portfolio|holdings|my\s+tokens|what\s+do\s+i\s+have)"),
        message=(
            "💰 **Portfolio**\n\n"
            "• \"Check my balance\" shows the agent wallet's SEI and USD value\n"
            "• \"Portfolio 0x... mainnet\" shows SEI and USDC for any address\n"
            "• \"Last 24 hours trades 0x...\" lists recent transfers"
        ),
        suggestions=["Check my balance", "Portfolio 0x... mainnet"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(market|price|trend|prediction|forecast|what\s+will\s+happen)"),
        message=(
            "🔮 **Market Intelligence**\n\n"
            "I can quote live swap prices from the DEX router and scan tokens before you buy.\n"
            "Try \"Swap 10 SEI to USDC\" for a live quote. Nothing executes until you confirm."
        ),
        suggestions=["Swap 10 SEI to USDC", "Scan a token"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(swap|trade|stake|yield|farm|lend|borrow)"),
        message=(
            "💎 **DeFi Operations**\n\n"
            "**🔄 Swapping**: \"Swap 100 SEI for USDC\" (1% slippage protection)\n"
            "**🥩 Staking**: \"Stake 50 SEI\"\n"
            "**🏦 Lending**: \"Lend 100 USDC\", \"Borrow 20 USDC\", \"Repay 20 USDC\"\n\n"
            "Just tell me the amount and the tokens."
        ),
        suggestions=["Swap tokens", "Stake SEI", "Lend tokens"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(scan|security|safe|honeypot|rug\s+pull|verify)"),
        message=(
            "🛡️ **Security & Token Scanning**\n\n"
            "Paste a token address and I'll check its contract code, metadata and supply, "
            "then give a 0-100 security score with a LOW/MEDIUM/HIGH risk level."
        ),
        intent=IntentType.TOKEN_SCAN,
        suggestions=["Scan a token", "Check security"],
    ),
    SmartResponse(
        pattern=re.compile(r"^(sei|network|blockchain|what\s+is\s+sei)"),
        message=(
            "🌊 **Sei Network**\n\n"
            "Sei is a Layer 1 blockchain built for trading and DeFi:\n"
            "• EVM compatible (mainnet chain id 1329, testnet 1328)\n"
            "• Sub-second finality\n"
            "• SEI is used for gas, staking and governance"
        ),
        confidence=0.95,
        suggestions=["Explore DeFi protocols", "Check my balance"],
    ),
]


def generate_smart_response(message: str) -> ChatResponse | None:
    """
    Canned reply for informational openers. Returns None to continue with intent recognition.
    """
    normalized = message.lower().strip()
    if _ACTIONABLE_RE.search(normalized):
        return None
    for smart in SMART_RESPONSES:
        if smart.pattern.search(normalized):
            return ChatResponse(
                message=smart.message,
                success=True,
                intent=smart.intent,
                confidence=smart.confidence,
                suggestions=list(smart.suggestions),
            )
    return None
