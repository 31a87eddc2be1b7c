from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType
from db.utils.time import utcnow


def default_preferences() -> dict:
    return {
        "risk_tolerance": "moderate",
        "trading_experience": "intermediate",
        "investment_goals": [],
        "favorite_protocols": [],
    }


class AgentMemory(Base):
    """Long-lived per-session memory: who the user is and what they watch."""

    __tablename__ = "agent_memory"

    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    preferences: Mapped[dict] = mapped_column(JSONType, nullable=False, default=default_preferences)
    watchlist: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    total_interactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_active: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
