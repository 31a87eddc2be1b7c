from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest

from app.chat import state_store
from app.chat.actions import ActionBrain
from app.chat.brain import NETWORK_PROMPT, ChatBrain
from app.chat.contracts import ConversationContext, IntentType, LLMAgentResponse
from db.repos.memory_repo import get_or_create_memory
from defi.router_v2 import SwapQuote

ADDR = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
RECIPIENT = "0x3333333333333333333333333333333333333333"
USDC_TESTNET = "0x948dff0c876EbEb1e233f9aF8Df81c23d4E068C6"


def _quote(impact: float = 0.1) -> SwapQuote:
    return SwapQuote(
        token_in="0x0",
        token_out=USDC_TESTNET,
        amount_in="10",
        amount_in_base_units=10 * 10**18,
        amount_out_base_units=5_000_000,
        amount_out=Decimal("5"),
        min_out=Decimal("4.95"),
        price_impact_pct=impact,
        slippage_bps=100,
    )


@pytest.fixture
def brain(db, fake_wallet):
    return ChatBrain(
        db,
        session_id="session-1",
        action_brain=ActionBrain(db, wallet_provider=lambda: fake_wallet),
    )


def test_swap_quote_then_confirm_executes(brain, fake_wallet):
    with patch("app.chat.actions.get_quote", return_value=_quote()):
        quote = brain.process_message("Swap 10 SEI to USDC")

    assert quote.success is True
    assert quote.intent == IntentType.SYMPHONY_SWAP
    assert 'Say "Yes" to execute or "Cancel" to abort.' in quote.message
    assert quote.data["pending_swap"]["min_out"] == "4.95"

    done = brain.process_message("yes")
    assert done.success is True
    assert done.message == "✅ Swap executed. TX: 0x" + "ab" * 32
    assert fake_wallet.swaps == [
        {"token_in": "0x0", "token_out": USDC_TESTNET, "amount": "10", "min_out": "4.95"}
    ]
    assert brain.get_session_stats()["pending_swap"] is False


def test_pending_swap_reprompts_then_cancels(brain, fake_wallet):
    with patch("app.chat.actions.get_quote", return_value=_quote()):
        brain.process_message("Swap 10 SEI to USDC")

    again = brain.process_message("what is the weather")
    assert again.success is False
    assert again.message.startswith("⏳ Pending swap: 10 → Min Out: 4.95.")
    assert brain.get_session_stats()["pending_swap"] is True

    cancelled = brain.process_message("cancel")
    assert cancelled.message == "✅ Cancelled. No swap executed."
    assert fake_wallet.swaps == []


def test_swap_failure_is_reported_and_pending_cleared(brain, fake_wallet):
    fake_wallet.fail_with = ValueError("insufficient balance for swap")
    with patch("app.chat.actions.get_quote", return_value=_quote()):
        brain.process_message("Swap 10 SEI to USDC")

    failed = brain.process_message("yes")
    assert failed.success is False
    assert failed.message == "❌ Swap failed: insufficient balance for swap"
    assert brain.get_session_stats()["pending_swap"] is False


def test_high_price_impact_is_refused(brain):
    with patch("app.chat.actions.get_quote", return_value=_quote(impact=12.5)):
        resp = brain.process_message("Swap 10 SEI to USDC")

    assert resp.success is False
    assert "High price impact (12.50%)" in resp.message
    assert brain.get_session_stats()["pending_swap"] is False


def test_transfer_confirm_sends_tokens(brain, fake_wallet):
    preview = brain.process_message(f"Send 0.5 SEI to {RECIPIENT}")
    assert preview.success is True
    assert "💸 Transfer Confirmation Required" in preview.message
    assert "• After: 12.0000 SEI" in preview.message

    done = brain.process_message("yes")
    assert done.intent == IntentType.TRANSFER_CONFIRMATION
    assert done.message.startswith("✅ Transfer successful!")
    assert "Your remaining balance: 12.0000 SEI" in done.message
    assert fake_wallet.transfers == [{"amount": 0.5, "recipient": RECIPIENT, "token": None}]


def test_transfer_cancel(brain, fake_wallet):
    brain.process_message(f"Send 0.5 SEI to {RECIPIENT}")
    resp = brain.process_message("never mind")
    assert resp.message == "❌ Transfer cancelled. No tokens were sent."
    assert fake_wallet.transfers == []


def test_transfer_unrelated_message_keeps_pending(brain, fake_wallet):
    brain.process_message(f"Send 0.5 SEI to {RECIPIENT}")
    resp = brain.process_message("check my balance")
    assert resp.intent == IntentType.BALANCE_CHECK
    assert "💰 Your wallet balance is current and up-to-date." in resp.message
    assert brain.get_session_stats()["pending_transfer"] is True


def test_usdc_transfer_uses_two_decimals(brain, fake_wallet):
    preview = brain.process_message(f"send 10 usdc to {RECIPIENT}")
    assert "USDC Transfer Confirmation Required" in preview.message
    assert "• Current: 40.50 USDC" in preview.message
    assert "• After: 30.50 USDC" in preview.message

    brain.process_message("confirm")
    assert fake_wallet.transfers[0]["token"] == fake_wallet.usdc_address


def test_transfer_insufficient_balance_fails(brain, fake_wallet):
    fake_wallet.sei = "0.1000"
    resp = brain.process_message(f"Send 0.5 SEI to {RECIPIENT}")
    assert resp.success is False
    assert resp.message.startswith("❌ I couldn't complete that action: ❌ Insufficient SEI balance")
    assert resp.suggestions == ["Try again", "Ask for help", "Check your input"]


def test_wallet_watch_without_network_prompts(brain):
    resp = brain.process_message(f"portfolio {ADDR}")
    assert resp.message == NETWORK_PROMPT
    assert resp.intent == IntentType.WALLET_INFO


def test_wallet_watch_portfolio(brain):
    portfolio = {
        "address": ADDR,
        "network": "mainnet",
        "chainId": 1329,
        "native": {"symbol": "SEI", "balanceWei": "1000000000000000000", "balance": "1"},
        "tokens": [{"symbol": "USDC", "address": USDC_TESTNET, "decimals": 6, "balance": "7.5"}],
    }
    with patch("app.chat.actions.fetch_portfolio", return_value=portfolio) as fetch:
        resp = brain.process_message(f"portfolio {ADDR} mainnet")

    assert resp.success is True
    assert "• SEI: 1" in resp.message
    assert "• USDC: 7.5" in resp.message
    assert fetch.call_args.kwargs["network"] == "mainnet"


def test_greeting_uses_smart_response(brain):
    resp = brain.process_message("hello")
    assert resp.intent == IntentType.CONVERSATION
    assert resp.message.startswith("👋 Hello!")


def test_unknown_uses_knowledge_with_its_suggestions(brain):
    resp = brain.process_message("tell me about liquidity")
    assert resp.intent == IntentType.UNKNOWN
    assert "Adding Liquidity" in resp.message
    assert resp.suggestions == ["🔄 Swap to balance the pair", "💰 Check my balance"]


def test_token_scan_updates_context_and_watchlist(brain, db):
    with (
        patch("chain.rpc.get_code", return_value=b"\x60\x80"),
        patch("chain.rpc.erc20_name", return_value="Blue Fox"),
        patch("chain.rpc.erc20_symbol", return_value="BFOX"),
        patch("chain.rpc.erc20_decimals", return_value=18),
        patch("chain.rpc.erc20_total_supply", return_value=10**24),
    ):
        resp = brain.process_message(f"scan {ADDR}")

    assert resp.intent == IntentType.TOKEN_SCAN
    assert "**Safety Score**: 95/100" in resp.message
    assert resp.message.endswith("🔍 This token has been analyzed for security and risk factors.")

    memory = get_or_create_memory(db, session_id="session-1")
    db.refresh(memory)
    assert memory.watchlist[0]["symbol"] == "BFOX"
    assert memory.total_interactions == 1


def test_todo_add_and_list(brain):
    added = brain.process_message("add todo check liquidity at 5pm")
    assert added.message == "✅ Added to your todo: check liquidity at 5pm"

    listed = brain.process_message("list todos")
    assert listed.intent == IntentType.TODO_LIST
    assert "1. check liquidity at 5pm" in listed.message


def test_user_name_is_remembered(brain, db):
    resp = brain.process_message("my name is alice")
    assert "Nice to meet you, Alice!" in resp.message
    memory = get_or_create_memory(db, session_id="session-1")
    db.refresh(memory)
    assert memory.user_name == "Alice"


def test_unexpected_error_returns_generic_response(brain):
    with patch("app.chat.brain.recognize_intent", side_effect=RuntimeError("boom")):
        resp = brain.process_message("qwerty")

    assert resp.success is False
    assert resp.intent == IntentType.UNKNOWN
    assert resp.message.startswith("🤖 I encountered an issue")
    # the user message still counts
    assert brain.get_session_stats()["message_count"] == 1


def test_history_and_stats(brain):
    brain.process_message("hello")
    brain.process_message("qwerty")

    history = brain.get_conversation_history()
    assert [m["role"] for m in history] == ["user", "assistant", "user", "assistant"]
    assert history[0]["message"] == "hello"

    stats = brain.get_session_stats()
    assert stats["message_count"] == 2
    assert stats["successful_actions"] == 1

    assert brain.clear_history() == 4
    assert brain.get_conversation_history() == []
    assert brain.get_session_stats()["message_count"] == 0


def test_remind_me_to_adds_a_todo(brain):
    resp = brain.process_message("Remind me to check liquidity at 5pm")
    assert resp.intent == IntentType.TODO_ADD
    assert resp.message == "✅ Added to your todo: check liquidity at 5pm"


def test_expired_sessions_are_purged_on_next_message(brain):
    state_store.set("someone-else", ConversationContext(), ttl_seconds=0)
    state_store.set("still-active", ConversationContext(), ttl_seconds=600)

    brain.process_message("hello")

    assert "someone-else" not in state_store._STORE
    assert state_store.get("still-active") is not None
    assert state_store.get("session-1") is not None


class FakeAgent:
    def __init__(self, reply=None):
        self.reply = reply
        self.calls = []

    def process_message(self, message):
        self.calls.append(message)
        return self.reply


@pytest.fixture
def llm_brain(db, fake_wallet):
    agent = FakeAgent(
        LLMAgentResponse(message="llm says hi", suggestions=["📈 View real-time charts"], data={"walletInfo": "x"})
    )
    chat = ChatBrain(
        db,
        session_id="session-llm",
        action_brain=ActionBrain(db, wallet_provider=lambda: fake_wallet),
        llm_agent=agent,
    )
    return chat, agent


def test_llm_agent_answers_non_action_messages(llm_brain):
    chat, agent = llm_brain
    resp = chat.process_message("tell me about yield strategies")

    assert agent.calls == ["tell me about yield strategies"]
    assert resp.intent == IntentType.CONVERSATION
    assert resp.message == "llm says hi"
    assert resp.suggestions == ["📈 View real-time charts"]
    assert chat.get_session_stats()["successful_actions"] == 1


def test_action_messages_skip_the_llm_agent(llm_brain):
    chat, agent = llm_brain
    resp = chat.process_message("check my balance")

    assert agent.calls == []
    assert resp.intent == IntentType.BALANCE_CHECK
    assert "💰 Your wallet balance is current and up-to-date." in resp.message


def test_unavailable_llm_agent_falls_through(db, fake_wallet):
    agent = FakeAgent(reply=None)
    chat = ChatBrain(
        db,
        session_id="session-fallback",
        action_brain=ActionBrain(db, wallet_provider=lambda: fake_wallet),
        llm_agent=agent,
    )
    resp = chat.process_message("hello")

    assert agent.calls == ["hello"]
    assert resp.intent == IntentType.CONVERSATION
    assert resp.message.startswith("👋 Hello!")
