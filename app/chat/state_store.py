from __future__ import annotations

import time
from typing import Any

from app.chat.contracts import ConversationContext
from app.config import get_settings


_STORE: dict[str, dict[str, Any]] = {}


def _now() -> float:
    return time.time()


def get(session_id: str) -> dict[str, Any] | None:
    state = _STORE.get(session_id)
    if not state:
        return None
    if state["expires_at"] <= _now():
        _STORE.pop(session_id, None)
        return None
    return state


def set(session_id: str, context: ConversationContext, *, ttl_seconds: int | None = None) -> None:
    if ttl_seconds is None:
        ttl_seconds = get_settings().chat_state_ttl_seconds
    now = _now()
    _STORE[session_id] = {
        "context": context.model_dump(mode="json"),
        "updated_at": now,
        "expires_at": now + ttl_seconds,
    }


def load_context(session_id: str) -> ConversationContext:
    """
    The session's conversation context, or a fresh one when missing or expired.
    """
    state = get(session_id)
    if state is None:
        return ConversationContext()
    return ConversationContext.model_validate(state["context"])


def delete(session_id: str) -> None:
    _STORE.pop(session_id, None)


def cleanup() -> int:
    now = _now()
    expired = [key for key, state in _STORE.items() if state["expires_at"] <= now]
    for key in expired:
        _STORE.pop(key, None)
    return len(expired)


def clear() -> None:
    _STORE.clear()
