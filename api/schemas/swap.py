from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class FixedSwapRequest(BaseModel):
    action: Literal["quote"] = "quote"
    seiAmount: str | None = None
    usdcAmount: str | None = None


class FixedSwapQuote(BaseModel):
    outUsdc: str | None = None
    outSei: str | None = None
