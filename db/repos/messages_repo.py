from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.chat_message import ChatMessage


def log_message(
    db: Session,
    *,
    session_id: str,
    role: str,
    message: str,
    intent: str | None = None,
    confidence: float | None = None,
    action_success: bool | None = None,
) -> ChatMessage:
    row = ChatMessage(
        session_id=session_id,
        role=role,
        message=message,
        intent=intent,
        confidence=confidence,
        action_success=action_success,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_messages(db: Session, *, session_id: str, limit: int | None = None) -> list[ChatMessage]:
    """Oldest first; with a limit, the most recent `limit` messages."""
    stmt = (
        select(ChatMessage)
        .where(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = list(db.execute(stmt).scalars().all())
    rows.reverse()
    return rows


def clear_messages(db: Session, *, session_id: str) -> int:
    result = db.execute(delete(ChatMessage).where(ChatMessage.session_id == session_id))
    db.commit()
    return result.rowcount or 0
