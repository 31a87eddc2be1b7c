from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

session_id_ctx: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


def set_session_id(session_id: Optional[str]) -> None:
    session_id_ctx.set(session_id)


def get_session_id() -> Optional[str]:
    return session_id_ctx.get()


@contextmanager
def session_context(session_id: Optional[str]) -> Iterator[None]:
    """Bind session_id for log records inside the block (chat bodies carry it, not the path)."""
    token = session_id_ctx.set(session_id)
    try:
        yield
    finally:
        session_id_ctx.reset(token)
