from __future__ import annotations

import logging
import re
import time
from typing import Any

from sqlalchemy.orm import Session

from app.chat import confirmations, state_store
from app.chat.actions import ActionBrain
from app.chat.agent import SeiLLMAgent
from app.chat.contracts import (
    ActionResponse,
    ChatResponse,
    ConversationContext,
    IntentResult,
    IntentType,
    PendingSwap,
    PendingTransfer,
    SessionStats,
)
from app.chat.intents import recognize_intent
from app.chat.smart_responses import generate_smart_response
from app.config import get_settings
from db.repos.memory_repo import get_or_create_memory, save_memory
from db.repos.messages_repo import clear_messages, list_messages, log_message

logger = logging.getLogger(__name__)

# messages that look like an action go straight to intent recognition
_ACTION_KEYWORDS_RE = re.compile(
    r"\b(swap|exchange|trades?|stake|unstake|redelegate|delegate|claim|create\s+.*token|make\s+.*token"
    r"|add\s+liquidity|burn|send|transfer|lend|supply|borrow|repay|balance|portfolio|holdings"
    r"|todos?|tasks?|remind\s+me)\b|0x[a-f0-9]{40}",
    re.IGNORECASE,
)
_NETWORK_RE = re.compile(r"\b(mainnet|testnet)\b", re.IGNORECASE)
_USER_NAME_RE = re.compile(r"\bmy name is (\w+)", re.IGNORECASE)

NETWORK_PROMPT = '🔎 Which network? Say "mainnet" or "testnet" with your request.'
GENERIC_ERROR = (
    "🤖 I encountered an issue processing your message. "
    "Please try being more specific or rephrasing your request."
)

_FOOTERS: dict[IntentType, str] = {
    IntentType.TOKEN_SCAN: "🔍 This token has been analyzed for security and risk factors.",
    IntentType.BALANCE_CHECK: "💰 Your wallet balance is current and up-to-date.",
    IntentType.STAKE_TOKENS: "🥩 Staking preview only.",
    IntentType.LEND_TOKENS: "🏦 Lending preview only.",
}

_SUGGESTIONS: dict[IntentType, list[str]] = {
    IntentType.TOKEN_SCAN: ["Scan another token", "Check your portfolio", "View market data"],
    IntentType.BALANCE_CHECK: ["Transfer tokens", "Swap tokens", "Stake for yield"],
    IntentType.SYMPHONY_SWAP: ["Check swap history", "View liquidity pools", "Monitor prices"],
    IntentType.STAKE_TOKENS: ["Check staking rewards", "Unstake tokens", "View APY rates"],
    IntentType.LEND_TOKENS: ["Check lending rates", "Borrow tokens", "View loan terms"],
}
_DEFAULT_SUGGESTIONS = ["Ask for help", "Check your portfolio", "Explore DeFi protocols"]
_FAILURE_SUGGESTIONS = ["Try again", "Ask for help", "Check your input"]
_ERROR_SUGGESTIONS = ["Try a different approach", "Ask for help", "Check your message format"]


def suggestions_for(intent: IntentType) -> list[str]:
    return list(_SUGGESTIONS.get(intent, _DEFAULT_SUGGESTIONS))


class ChatBrain:
    """
    Per-session conversation orchestrator.

    Confirmation flow first, then the LLM agent (non-action messages only), canned
    replies, and finally regex intents executed by ActionBrain. The conversation
    context lives in the state store; messages and memory live in the database.
    """

    def __init__(
        self,
        db: Session,
        *,
        session_id: str,
        action_brain: ActionBrain | None = None,
        llm_agent: SeiLLMAgent | None = None,
    ) -> None:
        self.db = db
        self.session_id = session_id
        self.action_brain = action_brain or ActionBrain(db)
        self._llm_agent = llm_agent

    @property
    def llm_agent(self) -> SeiLLMAgent:
        if self._llm_agent is None:
            self._llm_agent = SeiLLMAgent()
        return self._llm_agent

    def process_message(self, message: str) -> ChatResponse:
        context = state_store.load_context(self.session_id)
        try:
            return self._process(message, context)
        except Exception:
            logger.exception("chat processing failed")
            return ChatResponse(
                message=GENERIC_ERROR,
                success=False,
                intent=IntentType.UNKNOWN,
                confidence=0,
                suggestions=list(_ERROR_SUGGESTIONS),
            )
        finally:
            expired = state_store.cleanup()
            if expired:
                logger.debug("chat state cleanup expired=%s", expired)
            state_store.set(self.session_id, context)

    def _process(self, message: str, context: ConversationContext) -> ChatResponse:
        context.session.message_count += 1
        log_message(self.db, session_id=self.session_id, role="user", message=message)
        memory = get_or_create_memory(self.db, session_id=self.session_id)
        save_memory(self.db, memory, bump_interactions=True)

        confirmation = self._check_confirmation(message, context)
        if confirmation is not None:
            return self._record(confirmation)

        name_match = _USER_NAME_RE.search(message)
        if name_match:
            name = name_match.group(1).capitalize()
            save_memory(self.db, memory, user_name=name)
            return self._record(
                ChatResponse(
                    message=f"👋 Nice to meet you, {name}! I'll remember that. How can I help with DeFi today?",
                    success=True,
                    intent=IntentType.CONVERSATION,
                    confidence=0.9,
                    suggestions=list(_DEFAULT_SUGGESTIONS),
                )
            )

        if not _ACTION_KEYWORDS_RE.search(message):
            agent_response = self.llm_agent.process_message(message)
            if agent_response is not None and agent_response.success:
                context.session.successful_actions += 1
                return self._record(
                    ChatResponse(
                        message=agent_response.message,
                        success=True,
                        intent=IntentType.CONVERSATION,
                        confidence=agent_response.confidence,
                        suggestions=agent_response.suggestions,
                        data=agent_response.data,
                    )
                )

        smart = generate_smart_response(message)
        if smart is not None:
            return self._record(smart)

        intent_result = recognize_intent(message)
        if intent_result.intent in (IntentType.WALLET_INFO, IntentType.PROTOCOL_DATA) and not _NETWORK_RE.search(
            message
        ):
            return self._record(
                ChatResponse(
                    message=NETWORK_PROMPT,
                    success=True,
                    intent=IntentType.WALLET_INFO,
                    confidence=0.8,
                )
            )

        enhanced = self._enhance_with_context(intent_result, context)
        action = self.action_brain.execute_action(enhanced, session_id=self.session_id)
        self._update_context(enhanced, action, context)

        response = self._conversational_response(enhanced, action)
        if action.success:
            context.session.successful_actions += 1
        else:
            context.session.failed_actions += 1
        return self._record(response, action_success=action.success)

    # ---------------------------
    # Confirmation flow
    # ---------------------------

    def _check_confirmation(self, message: str, context: ConversationContext) -> ChatResponse | None:
        if context.pending_swap is not None:
            if confirmations.is_swap_confirm(message):
                pending = context.pending_swap
                context.pending_swap = None
                return self._execute_pending_swap(pending)
            if confirmations.is_swap_cancel(message):
                context.pending_swap = None
                return ChatResponse(
                    message="✅ Cancelled. No swap executed.",
                    success=True,
                    intent=IntentType.SYMPHONY_SWAP,
                    confidence=0.9,
                )
            return ChatResponse(
                message=(
                    f"⏳ Pending swap: {context.pending_swap.amount} → Min Out: {context.pending_swap.min_out}. "
                    'Say "Yes" to proceed or "Cancel" to abort.'
                ),
                success=False,
                intent=IntentType.SYMPHONY_SWAP,
                confidence=0.7,
            )

        if context.pending_transfer is None:
            return None
        if confirmations.is_transfer_confirm(message):
            pending = context.pending_transfer
            context.pending_transfer = None
            return self._execute_pending_transfer(pending)
        if confirmations.is_transfer_cancel(message):
            context.pending_transfer = None
            return ChatResponse(
                message="❌ Transfer cancelled. No tokens were sent.",
                success=True,
                intent=IntentType.TRANSFER_CONFIRMATION,
                confidence=0.9,
            )
        return None

    def _execute_pending_swap(self, pending: PendingSwap) -> ChatResponse:
        try:
            tx_hash = self.action_brain.wallet.swap_tokens(
                token_in=pending.token_in,
                token_out=pending.token_out,
                amount=pending.amount,
                min_out=pending.min_out,
            )
        except Exception as e:
            logger.warning("pending swap failed: %s", e)
            return ChatResponse(
                message=f"❌ Swap failed: {e}",
                success=False,
                intent=IntentType.SYMPHONY_SWAP,
                confidence=0.6,
            )
        return ChatResponse(
            message=f"✅ Swap executed. TX: {tx_hash}",
            success=True,
            intent=IntentType.SYMPHONY_SWAP,
            confidence=0.95,
            data={"txHash": tx_hash},
        )

    def _execute_pending_transfer(self, pending: PendingTransfer) -> ChatResponse:
        symbol = "USDC" if pending.token else "SEI"
        try:
            tx_hash = self.action_brain.wallet.transfer_token(pending.amount, pending.recipient, pending.token)
        except Exception as e:
            logger.warning("pending transfer failed: %s", e)
            return ChatResponse(
                message=f"❌ Transfer failed: {e}\n\nPlease try again or check your balance.",
                success=False,
                intent=IntentType.TRANSFER_CONFIRMATION,
                confidence=0.8,
            )
        return ChatResponse(
            message=(
                "✅ Transfer successful!\n\n"
                f"💰 Amount: {pending.amount} {symbol}\n"
                f"📤 To: {pending.recipient}\n"
                f"🔗 Transaction: {tx_hash}\n\n"
                f"Your remaining balance: {pending.remaining_balance} {symbol}"
            ),
            success=True,
            intent=IntentType.TRANSFER_CONFIRMATION,
            confidence=0.95,
            data={"txHash": tx_hash},
        )

    # ---------------------------
    # Context
    # ---------------------------

    @staticmethod
    def _enhance_with_context(intent_result: IntentResult, context: ConversationContext) -> IntentResult:
        enhanced = intent_result.model_copy(deep=True)
        if context.last_token_address and not enhanced.entities.token_address:
            enhanced.entities.token_address = context.last_token_address
        return enhanced

    @staticmethod
    def _update_context(intent_result: IntentResult, action: ActionResponse, context: ConversationContext) -> None:
        if intent_result.entities.token_address:
            context.last_token_address = intent_result.entities.token_address
        context.last_action = intent_result.intent

        if intent_result.intent == IntentType.SEND_TOKENS and action.success and action.data.get("pending_transfer"):
            context.pending_transfer = PendingTransfer.model_validate(action.data["pending_transfer"])
        if intent_result.intent == IntentType.SYMPHONY_SWAP and action.data.get("pending_swap"):
            context.pending_swap = PendingSwap.model_validate(action.data["pending_swap"])

    @staticmethod
    def _conversational_response(intent_result: IntentResult, action: ActionResponse) -> ChatResponse:
        if not action.success:
            return ChatResponse(
                message=f"❌ I couldn't complete that action: {action.response}\n\nPlease try again or ask for help.",
                success=False,
                intent=intent_result.intent,
                confidence=intent_result.confidence,
                suggestions=list(_FAILURE_SUGGESTIONS),
                data=action.data,
            )

        message = action.response
        footer = _FOOTERS.get(intent_result.intent)
        if footer:
            message += f"\n\n{footer}"
        if action.follow_up:
            message += "\n\n" + "\n".join(f"👉 {line}" for line in action.follow_up)

        suggestions = action.data.get("suggestions") or suggestions_for(intent_result.intent)
        return ChatResponse(
            message=message,
            success=True,
            intent=intent_result.intent,
            confidence=intent_result.confidence,
            suggestions=list(suggestions),
            data=action.data,
        )

    def _record(self, response: ChatResponse, *, action_success: bool | None = None) -> ChatResponse:
        log_message(
            self.db,
            session_id=self.session_id,
            role="assistant",
            message=response.message,
            intent=response.intent.value,
            confidence=response.confidence,
            action_success=response.success if action_success is None else action_success,
        )
        return response

    # ---------------------------
    # History / stats
    # ---------------------------

    def get_conversation_history(self, *, limit: int | None = None) -> list[dict[str, Any]]:
        rows = list_messages(
            self.db, session_id=self.session_id, limit=limit or get_settings().chat_history_limit
        )
        return [
            {
                "id": row.id,
                "role": row.role,
                "message": row.message,
                "intent": row.intent,
                "confidence": row.confidence,
                "action_success": row.action_success,
                "created_at": row.created_at.isoformat() if row.created_at else None,
            }
            for row in rows
        ]

    def clear_history(self) -> int:
        """
        Drop stored messages and the conversation context (pending confirmations included).
        """
        removed = clear_messages(self.db, session_id=self.session_id)
        state_store.delete(self.session_id)
        return removed

    def get_session_stats(self) -> dict[str, Any]:
        context = state_store.load_context(self.session_id)
        stats: SessionStats = context.session
        return {
            **stats.model_dump(),
            "duration_s": round(time.time() - stats.start_time, 3),
            "pending_swap": context.pending_swap is not None,
            "pending_transfer": context.pending_transfer is not None,
        }


def get_chat_brain(db: Session, session_id: str) -> ChatBrain:
    return ChatBrain(db, session_id=session_id)
