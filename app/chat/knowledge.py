"""Built-in DeFi answers used when the LLM agent is not available."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class KnowledgeEntry:
    keywords: tuple[str, ...]
    message: str
    suggestions: list[str] = field(default_factory=list)


KNOWLEDGE: list[KnowledgeEntry] = [
    KnowledgeEntry(
        keywords=("portfolio", "optimize", "allocation"),
        message=(
            "📊 **Portfolio Optimization**\n\n"
            "• SEI: core holding with staking rewards\n"
            "• USDC: stable reserve for opportunities\n"
            "• Custom tokens: growth potential, higher risk\n\n"
            "**Recommendations:**\n"
            "1. Keep a stable reserve before adding volatile tokens\n"
            "2. Allocate a measured share to DeFi protocols\n"
            "3. Rebalance monthly\n\n"
            "Say \"check my balance\" to start from your actual holdings."
        ),
        suggestions=["💰 Check my balance", "⚖️ Rebalancing ideas", "🔍 Scan a token"],
    ),
    KnowledgeEntry(
        keywords=("market analysis", "trend", "prediction"),
        message=(
            "📈 **Market Analysis**\n\n"
            "I don't publish price predictions. Useful signals to watch on Sei:\n"
            "• DeFi TVL growth and new protocol launches\n"
            "• DEX volume on SEI/USDC\n"
            "• Funding and liquidity conditions across the market\n\n"
            "Trade sizes you can afford to lose and use limit-style slippage."
        ),
        suggestions=["🔄 Swap 10 SEI to USDC", "💰 Check my balance"],
    ),
    KnowledgeEntry(
        keywords=("trading strategy", "strategy", "plan"),
        message=(
            "🎯 **Trading Strategies**\n\n"
            "1. **DCA**: buy a fixed amount on a schedule to reduce timing risk\n"
            "2. **Swing trading**: small share of the portfolio, predefined exits\n"
            "3. **Yield farming**: stable protocols, compound rewards\n"
            "4. **Liquidity provision**: major pairs, watch impermanent loss\n\n"
            "**Risk rule**: never risk more than 2% of the portfolio per trade."
        ),
        suggestions=["🔄 Swap SEI to USDC", "🥩 Stake SEI", "⚠️ Risk assessment"],
    ),
    KnowledgeEntry(
        keywords=("risk", "assessment", "volatility"),
        message=(
            "⚠️ **Risk Management**\n\n"
            "• Diversify: no single volatile asset above 20%\n"
            "• Keep a stable reserve (USDC)\n"
            "• Scan unknown tokens before buying\n"
            "• Rebalance regularly\n\n"
            "Send me a token address and I'll run a security scan."
        ),
        suggestions=["🔍 Scan a token", "💰 Check my balance"],
    ),
    KnowledgeEntry(
        keywords=("yield", "farming", "apy"),
        message=(
            "💰 **Yield on Sei**\n\n"
            "• Staking SEI: lowest risk, network rewards\n"
            "• Lending USDC: steady yield, protocol risk\n"
            "• Liquidity pools: higher yield, impermanent loss\n\n"
            "Higher APY always means higher risk. Start with staking."
        ),
        suggestions=["🥩 Stake 10 SEI", "🏦 Lend 100 USDC"],
    ),
    KnowledgeEntry(
        keywords=("top dex", "best dex", "largest dex"),
        message=(
            "🏆 **DEXs on Sei**\n\n"
            "• DragonSwap: the default router for swaps here\n"
            "• Other AMMs offer SEI/USDC pools with varying depth\n\n"
            "Compare quotes before large trades and keep slippage at 1% or below."
        ),
        suggestions=["🔄 Swap 10 SEI to USDC"],
    ),
    KnowledgeEntry(
        keywords=("sei network", "what is sei"),
        message=(
            "🌊 **Sei Network** is a Layer 1 blockchain optimized for trading.\n\n"
            "• EVM compatible (chain id 1329 on mainnet, 1328 on testnet)\n"
            "• Fast finality for order-heavy apps\n"
            "• Native token: SEI, used for gas, staking and governance"
        ),
        suggestions=["💰 Check my balance", "🚀 Create a token"],
    ),
    KnowledgeEntry(
        keywords=("defi", "protocols"),
        message=(
            "🏦 **DeFi on Sei**\n\n"
            "• DEXs for swaps and liquidity\n"
            "• Lending markets for supplying and borrowing\n"
            "• Liquid staking for SEI\n\n"
            "I can quote swaps, preview staking and lending, and scan tokens."
        ),
        suggestions=["🔄 Swap tokens", "🥩 Stake SEI", "🔍 Scan a token"],
    ),
    KnowledgeEntry(
        keywords=("liquidity", "add liquidity"),
        message=(
            "💧 **Adding Liquidity**\n\n"
            "1. Pick a pair with real volume (e.g. SEI/USDC)\n"
            "2. Deposit both tokens at the pool ratio\n"
            "3. Earn a share of trading fees\n\n"
            "⚠️ Impermanent loss grows as the two prices diverge."
        ),
        suggestions=["🔄 Swap to balance the pair", "💰 Check my balance"],
    ),
    KnowledgeEntry(
        keywords=("burn", "destroy token"),
        message=(
            "🔥 **Token Burning**\n\n"
            "Burning sends tokens to an address nobody controls, which lowers supply.\n"
            "Only burn tokens you created or fully understand. Burns cannot be undone."
        ),
        suggestions=["🚀 Create a token"],
    ),
    KnowledgeEntry(
        keywords=("scan", "analyze token"),
        message=(
            "🔍 **Token Scanning**\n\n"
            "Paste a token contract address (0x...) and I'll check:\n"
            "• deployed contract code\n"
            "• name, symbol and decimals\n"
            "• readable total supply\n\n"
            "You get a 0-100 safety score and a LOW/MEDIUM/HIGH risk level."
        ),
        suggestions=["🔍 Scan 0x..."],
    ),
]


def lookup(message: str) -> KnowledgeEntry | None:
    normalized = message.lower()
    for entry in KNOWLEDGE:
        if any(keyword in normalized for keyword in entry.keywords):
            return entry
    return None
