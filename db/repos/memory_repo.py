from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from db.models.agent_memory import AgentMemory, default_preferences
from db.utils.time import utcnow


def get_or_create_memory(db: Session, *, session_id: str) -> AgentMemory:
    memory = db.get(AgentMemory, session_id)
    if memory is None:
        memory = AgentMemory(
            session_id=session_id,
            preferences=default_preferences(),
            watchlist=[],
            total_interactions=0,
        )
        db.add(memory)
        db.commit()
        db.refresh(memory)
    return memory


def save_memory(
    db: Session,
    memory: AgentMemory,
    *,
    user_name: str | None = None,
    preferences: dict[str, Any] | None = None,
    watchlist: list[dict[str, Any]] | None = None,
    bump_interactions: bool = False,
) -> AgentMemory:
    # JSON columns are reassigned (not mutated) so the change is flushed
    if user_name is not None:
        memory.user_name = user_name
    if preferences is not None:
        memory.preferences = dict(preferences)
    if watchlist is not None:
        memory.watchlist = list(watchlist)
    if bump_interactions:
        memory.total_interactions = (memory.total_interactions or 0) + 1
    memory.last_active = utcnow()
    db.add(memory)
    db.commit()
    db.refresh(memory)
    return memory


def delete_memory(db: Session, *, session_id: str) -> bool:
    memory = db.get(AgentMemory, session_id)
    if memory is None:
        return False
    db.delete(memory)
    db.commit()
    return True
