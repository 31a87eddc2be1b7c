from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PortfolioRequest(BaseModel):
    address: str = Field(..., min_length=3, max_length=64)
    network: str = "mainnet"
    includeSymbols: list[str] = Field(default_factory=lambda: ["USDC"])


class NativeBalance(BaseModel):
    symbol: str
    balanceWei: str
    balance: str


class TokenBalance(BaseModel):
    symbol: str
    address: str
    decimals: int
    balance: str


class PortfolioResponse(BaseModel):
    address: str
    network: str
    chainId: int
    native: NativeBalance
    tokens: list[TokenBalance]


class InteractionsRequest(BaseModel):
    address: str = Field(..., min_length=3, max_length=64)
    network: str = "mainnet"
    limit: int = Field(10, ge=1, le=100)
    includeNative: bool = False
    nativeBlocks: int = Field(800, ge=1, le=5000)
    hours: int | None = None


class InteractionsResponse(BaseModel):
    address: str
    network: str
    fromBlock: int
    toBlock: int
    hours: int | None = None
    transfers: list[dict[str, Any]]
    native: list[dict[str, Any]]
