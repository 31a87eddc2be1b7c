from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IntentType(str, Enum):
    TOKEN_SCAN = "token_scan"
    TOKEN_CREATE = "token_create"
    BALANCE_CHECK = "balance_check"
    CONVERSATION = "conversation"
    PROTOCOL_DATA = "protocol_data"
    HELP = "help"
    UNKNOWN = "unknown"
    SYMPHONY_SWAP = "symphony_swap"
    STAKE_TOKENS = "stake_tokens"
    UNSTAKE_TOKENS = "unstake_tokens"
    LEND_TOKENS = "lend_tokens"
    BORROW_TOKENS = "borrow_tokens"
    REPAY_LOAN = "repay_loan"
    WALLET_INFO = "wallet_info"
    SEND_TOKENS = "send_tokens"
    TRANSFER_CONFIRMATION = "transfer_confirmation"
    TODO_ADD = "todo_add"
    TODO_LIST = "todo_list"


class ExtractedEntities(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token_address: str | None = None
    amount: float | None = None
    token_name: str | None = None
    token_symbol: str | None = None
    token_in: str | None = None
    token_out: str | None = None
    recipient: str | None = None
    transfer_amount: float | None = None


class IntentResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    intent: IntentType
    confidence: float = Field(ge=0, le=1)
    entities: ExtractedEntities = Field(default_factory=ExtractedEntities)
    raw_message: str


class ActionResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: bool
    response: str
    data: dict[str, Any] = Field(default_factory=dict)
    follow_up: list[str] = Field(default_factory=list)


class PendingSwap(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: str
    token_in: str
    token_out: str
    min_out: str


class PendingTransfer(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: float
    recipient: str
    current_balance: str
    remaining_balance: str
    token: str | None = None
    timestamp: float = Field(default_factory=time.time)


class SessionStats(BaseModel):
    start_time: float = Field(default_factory=time.time)
    message_count: int = 0
    successful_actions: int = 0
    failed_actions: int = 0


class ConversationContext(BaseModel):
    last_token_address: str | None = None
    last_action: IntentType | None = None
    pending_transfer: PendingTransfer | None = None
    pending_swap: PendingSwap | None = None
    session: SessionStats = Field(default_factory=SessionStats)


class ChatResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    success: bool
    intent: IntentType
    confidence: float
    suggestions: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


class LLMAgentResponse(BaseModel):
    message: str
    success: bool = True
    confidence: float = 0.95
    suggestions: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


class ChatMessageRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: str = Field(min_length=1, max_length=128)
    message: str = Field(min_length=1)
