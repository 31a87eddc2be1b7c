from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ChatMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: str
    message: str
    intent: str | None = None
    confidence: float | None = None
    action_success: bool | None = None
    created_at: datetime


class ChatHistoryResponse(BaseModel):
    session_id: str
    messages: list[ChatMessageRead]


class ClearHistoryResponse(BaseModel):
    session_id: str
    removed: int


class SessionStatsResponse(BaseModel):
    session_id: str
    start_time: float
    message_count: int
    successful_actions: int
    failed_actions: int
    duration_s: float
    pending_swap: bool
    pending_transfer: bool


class MemoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    user_name: str | None = None
    preferences: dict[str, Any]
    watchlist: list[dict[str, Any]]
    total_interactions: int
    last_active: datetime
    created_at: datetime
