from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BetaApplicationRequest(BaseModel):
    x_username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    top_protocol: str = Field(..., min_length=1, max_length=128)
    followed_seifu: bool = False
    followed_miles: bool = False


class BetaApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    x_username: str
    email: str
    top_protocol: str
    followed_seifu: bool
    followed_miles: bool
