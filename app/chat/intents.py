from __future__ import annotations

import re

from app.chat.contracts import ExtractedEntities, IntentResult, IntentType
from app.config import get_settings
from defi.router_v2 import NATIVE_TOKEN

ADDRESS_RE = re.compile(r"0x[a-f0-9]{40}", re.IGNORECASE)
AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)")

_LAST_TRADES_RE = re.compile(r"\blast(\s+\d+)?\s+trades?\b|\blatest\s+trades?\b")
_WALLET_INFO_RE = re.compile(r"\b(usdc\s+balance|holdings|portfolio)\b")
_SEND_RE = re.compile(r"\b(send|transfer)\b")
_SWAP_RE = re.compile(r"\b(swap|exchange|trade)\b")
_SEI_TO_USDC_RE = re.compile(r"sei\s*(for|to)\s*usdc")
_USDC_TO_SEI_RE = re.compile(r"usdc\s*(for|to)\s*sei")
_TOKEN_CREATE_RE = re.compile(r"create\s+.*token|make\s+.*token")
_BALANCE_RE = re.compile(r"balance|how\s+much\s+sei|wallet")
_TODO_ADD_RE = re.compile(r"(add|create|make).*\b(todo|task)\b|\bremind me to\b")
_TODO_LIST_RE = re.compile(
    r"(what are we doing today|today'?s todo|my tasks|list todos|remind me|what do i want to do)"
)
_CONVERSATION_RE = re.compile(r"(hello|hi|hey|help|what can you do)")

# checked in order; unstake must precede stake
_DEFI_PATTERNS: list[tuple[re.Pattern, IntentType]] = [
    (re.compile(r"\b(unstake|undelegate)\b"), IntentType.UNSTAKE_TOKENS),
    (re.compile(r"\b(stake|delegate)\b"), IntentType.STAKE_TOKENS),
    (re.compile(r"\b(lend|supply)\b"), IntentType.LEND_TOKENS),
    (re.compile(r"\bborrow\b"), IntentType.BORROW_TOKENS),
    (re.compile(r"\brepay\b"), IntentType.REPAY_LOAN),
]

_TOKEN_NAME_PATTERNS = [
    re.compile(r"create.*token.*called\s+([a-zA-Z0-9\s]+)", re.IGNORECASE),
    re.compile(r"create\s+([a-zA-Z0-9\s]+)\s+token", re.IGNORECASE),
    re.compile(r"make.*token.*named\s+([a-zA-Z0-9\s]+)", re.IGNORECASE),
    re.compile(r"new.*token.*called\s+([a-zA-Z0-9\s]+)", re.IGNORECASE),
]


def extract_token_name(message: str) -> str | None:
    for pattern in _TOKEN_NAME_PATTERNS:
        m = pattern.search(message)
        if m and m.group(1).strip():
            return m.group(1).strip()
    return None


def extract_amount(normalized: str) -> float | None:
    """
    First decimal number in the text once addresses are removed.
    """
    m = AMOUNT_RE.search(ADDRESS_RE.sub(" ", normalized))
    return float(m.group(1)) if m else None


def _result(intent: IntentType, confidence: float, entities: ExtractedEntities, message: str) -> IntentResult:
    return IntentResult(intent=intent, confidence=confidence, entities=entities, raw_message=message)


def recognize_intent(message: str) -> IntentResult:
    """
    Regex intent recognition. Patterns are tested in priority order; the first match wins.
    """
    normalized = message.lower().strip()
    entities = ExtractedEntities()

    addr = ADDRESS_RE.search(normalized)
    if addr:
        entities.token_address = addr.group(0)
    entities.amount = extract_amount(normalized)

    # wallet watch
    if addr and _LAST_TRADES_RE.search(normalized):
        return _result(
            IntentType.PROTOCOL_DATA, 0.95, ExtractedEntities(token_address=addr.group(0)), message
        )
    if addr and _WALLET_INFO_RE.search(normalized):
        return _result(
            IntentType.WALLET_INFO, 0.9, ExtractedEntities(token_address=addr.group(0)), message
        )

    if _SEND_RE.search(normalized):
        entities.recipient = entities.token_address
        entities.transfer_amount = entities.amount
        return _result(IntentType.SEND_TOKENS, 0.9, entities, message)

    if _SWAP_RE.search(normalized) and not _LAST_TRADES_RE.search(normalized):
        if re.search(r"\bsei\b", normalized) and re.search(r"\busdc\b", normalized):
            settings = get_settings()
            usdc = settings.usdc_address(settings.sei_network)
            if _SEI_TO_USDC_RE.search(normalized):
                entities.token_in, entities.token_out = NATIVE_TOKEN, usdc
            elif _USDC_TO_SEI_RE.search(normalized):
                entities.token_in, entities.token_out = usdc, NATIVE_TOKEN
        return _result(IntentType.SYMPHONY_SWAP, 0.9, entities, message)

    if _TOKEN_CREATE_RE.search(normalized):
        entities.token_name = extract_token_name(message)
        return _result(IntentType.TOKEN_CREATE, 0.9, entities, message)

    for pattern, intent in _DEFI_PATTERNS:
        if pattern.search(normalized):
            return _result(intent, 0.85, entities, message)

    if _BALANCE_RE.search(normalized):
        return _result(IntentType.BALANCE_CHECK, 0.8, entities, message)

    if entities.token_address:
        return _result(IntentType.TOKEN_SCAN, 0.95, entities, message)

    if _TODO_ADD_RE.search(normalized):
        return _result(IntentType.TODO_ADD, 0.9, entities, message)
    if _TODO_LIST_RE.search(normalized):
        return _result(IntentType.TODO_LIST, 0.9, entities, message)

    if _CONVERSATION_RE.search(normalized):
        return _result(IntentType.CONVERSATION, 0.7, entities, message)

    return _result(IntentType.UNKNOWN, 0.1, entities, message)
