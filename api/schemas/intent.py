from __future__ import annotations

from pydantic import BaseModel


class IntentParseRequest(BaseModel):
    message: str | None = None


class ParsedIntent(BaseModel):
    intent: str
    fromToken: str | None = None
    toToken: str | None = None
    amount: str
    maxSlippagePct: float = 0.5
    preferredDex: str = "DragonSwap"
    executionMode: str = "preview"
    gasPreference: str = "balanced"
