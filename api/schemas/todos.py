from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TodoCreateRequest(BaseModel):
    task: str = Field(..., min_length=1, max_length=2000)


class TodoUpdateRequest(BaseModel):
    completed: bool


class TodoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    task: str
    completed: bool
    created_at: datetime
