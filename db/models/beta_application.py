from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.utils.time import utcnow


class BetaApplication(Base):
    __tablename__ = "beta_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    x_username: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    top_protocol: Mapped[str] = mapped_column(String(128), nullable=False)
    followed_seifu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    followed_miles: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
