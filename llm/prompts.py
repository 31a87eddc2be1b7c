from __future__ import annotations

from typing import Any, Dict


SWAP_PLAN_TOOL_NAME = "build_swap_plan"

SWAP_PLAN_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": SWAP_PLAN_TOOL_NAME,
        "description": "Extract structured fields for a swap or liquidity intent",
        "parameters": {
            "type": "object",
            "properties": {
                "intent": {
                    "type": "string",
                    "description": "swap | add_liquidity | remove_liquidity",
                },
                "fromToken": {"type": "string"},
                "toToken": {"type": "string"},
                "amount": {
                    "type": "string",
                    "description": "human readable amount, e.g. 0.2",
                },
                "maxSlippagePct": {
                    "type": "number",
                    "description": "percentage, e.g. 0.5 for 0.5%",
                },
                "preferredDex": {"type": "string"},
                "executionMode": {
                    "type": "string",
                    "enum": ["preview", "execute", "auto"],
                },
                "gasPreference": {
                    "type": "string",
                    "description": "economy | balanced | fast",
                },
            },
            "required": ["intent", "amount"],
        },
    },
}

INTENT_PARSE_SYSTEM = (
    "You extract strict JSON for swap/liquidity intents on Sei. "
    "Do not guess addresses."
)


AGENT_SYSTEM = """You are Seilor 0, an AI assistant for DeFi on the Sei Network.

KNOWLEDGE:
- Sei is a Layer 1 blockchain optimized for trading, with EVM compatibility.
- Chain IDs: mainnet 1329, testnet 1328. Native token: SEI.
- Swaps route through {dex_name}. Staking, lending and liquidity flows are previewed before execution.

RULES:
- Use the wallet data below when the user asks about their funds. Never invent balances.
- Never claim a transaction was sent. On-chain actions are executed by the app only after the user confirms.
- For swaps, transfers, token creation or scans, tell the user the exact phrase to type, e.g. "Swap 10 SEI to USDC".
- Be concise, use short bullet lists, and include a risk note for anything involving funds.

{wallet_info}
"""


def build_intent_parse_prompt(message: str) -> Dict[str, str]:
    return {"system": INTENT_PARSE_SYSTEM, "user": message}


def build_agent_prompt(message: str, *, wallet_info: str, dex_name: str) -> Dict[str, str]:
    return {
        "system": AGENT_SYSTEM.format(wallet_info=wallet_info, dex_name=dex_name),
        "user": message,
    }
