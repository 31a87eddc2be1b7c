from __future__ import annotations

from unittest.mock import patch

import pytest

from app.chat.actions import ActionBrain, format_amount
from app.chat.contracts import ExtractedEntities, IntentResult, IntentType
from app.chat.intents import recognize_intent
from defi.router_v2 import SwapRouteError

ADDR = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"


@pytest.fixture
def actions(db, fake_wallet):
    return ActionBrain(db, wallet_provider=lambda: fake_wallet)


def _run(actions: ActionBrain, message: str):
    return actions.execute_action(recognize_intent(message), session_id="s-actions")


def test_format_amount_drops_exponent_and_trailing_zeros():
    assert format_amount(10.0) == "10"
    assert format_amount("0.50") == "0.5"
    assert format_amount(1e-7) == "0.0000001"


def test_swap_requires_tokens(actions):
    resp = _run(actions, "swap 10 foo to bar")
    assert resp.success is False
    assert "specify both input and output tokens" in resp.response


def test_swap_requires_amount(actions):
    resp = _run(actions, "swap sei to usdc")
    assert resp.success is False
    assert "Missing or invalid amount" in resp.response


def test_swap_falls_back_to_fixed_rate_when_router_missing(actions, monkeypatch):
    monkeypatch.setenv("SWAP_FIXED_USDC_PER_SEI", "0.5")
    from app.config import get_settings

    get_settings.cache_clear()
    actions.settings = get_settings()
    with patch("app.chat.actions.get_quote", side_effect=SwapRouteError("no DEX router configured")):
        resp = _run(actions, "swap 10 sei to usdc")

    assert resp.success is True
    assert "• Expected Out: 5 USDC" in resp.response
    assert resp.data["pending_swap"]["min_out"] == "4.95"
    assert resp.data["quote"] == {"source": "fixed"}


def test_swap_without_route_or_fixed_rate_fails(actions):
    with patch("app.chat.actions.get_quote", side_effect=SwapRouteError("no DEX router configured")):
        resp = _run(actions, "swap 10 sei to usdc")

    assert resp.success is False
    assert "No liquidity or route found" in resp.response


def test_send_rejects_invalid_recipient(actions):
    intent = IntentResult(
        intent=IntentType.SEND_TOKENS,
        confidence=0.9,
        entities=ExtractedEntities(recipient="0x1234", transfer_amount=1.0),
        raw_message="send 1 sei to 0x1234",
    )
    resp = actions.execute_action(intent, session_id="s-actions")
    assert resp.success is False
    assert resp.response == "❌ Invalid recipient address: 0x1234"


def test_send_requires_details(actions):
    resp = _run(actions, "send some sei")
    assert resp.success is False
    assert "Missing transfer details" in resp.response


def test_token_create_with_wizard(actions, fake_wallet):
    resp = _run(actions, "Create a token called BlueFox: 5000000, 100, bluefox.io, @bluefox")
    assert resp.success is True
    assert fake_wallet.created == [{"name": "BlueFox", "symbol": "BLUEF", "total_supply": 5_000_000}]
    assert "• Supply: 5,000,000" in resp.response
    assert resp.data["token"]["website"] == "bluefox.io"
    assert resp.follow_up == []


def test_token_create_defaults_and_follow_up(actions, fake_wallet):
    resp = _run(actions, "create a token called Moon")
    assert resp.success is True
    assert fake_wallet.created[0]["total_supply"] == 1_000_000
    assert len(resp.follow_up) == 1


def test_token_create_without_name(actions):
    resp = _run(actions, "make a token")
    assert resp.success is False
    assert "Token Creation" in resp.response


def test_stake_checks_balance(actions, fake_wallet):
    fake_wallet.sei = "1.0000"
    resp = _run(actions, "stake 50 sei")
    assert resp.success is False
    assert "Insufficient SEI balance" in resp.response


def test_lend_preview_reports_pending_integration(actions):
    resp = _run(actions, "lend 100 usdc")
    assert resp.success is True
    assert "• Amount: 100 USDC" in resp.response
    assert "No transaction was sent." in resp.response
    assert resp.data["protocol_action"] == "lend"


def test_protocol_action_requires_amount(actions):
    resp = _run(actions, "borrow usdc")
    assert resp.success is False
    assert 'Example: "Borrow 10 USDC"' in resp.response


def test_recent_trades_limits_and_orders(actions):
    data = {
        "address": ADDR,
        "network": "mainnet",
        "fromBlock": 100,
        "toBlock": 200,
        "hours": None,
        "transfers": [
            {
                "token": "0x2222222222222222222222222222222222222222",
                "from": ADDR,
                "to": "0x3333333333333333333333333333333333333333",
                "amount": "1.5",
                "rawAmount": "1500000",
                "txHash": "0x" + "11" * 32,
                "blockNumber": 150,
            }
        ],
        "native": [
            {
                "from": "0x3333333333333333333333333333333333333333",
                "to": ADDR,
                "value": "2",
                "txHash": "0x" + "22" * 32,
                "blockNumber": 190,
            }
        ],
    }
    with patch("app.chat.actions.fetch_interactions", return_value=data) as fetch:
        resp = _run(actions, f"last 5 trades {ADDR} mainnet")

    assert fetch.call_args.kwargs["limit"] == 5
    assert fetch.call_args.kwargs["include_native"] is True
    lines = resp.response.splitlines()
    assert lines[0] == f"🧾 Recent 2 transfer(s) for {ADDR} on mainnet"
    assert lines[1].startswith("1. Native 2.0000 SEI ⬅️")
    assert lines[2].startswith("2. ERC20 1.5 @ 0x2222222222222222222222222222222222222222 ➡️")


def test_recent_trades_hours_window_is_clamped(actions):
    empty = {"address": ADDR, "network": "testnet", "fromBlock": 0, "toBlock": 1, "hours": 168, "transfers": [], "native": []}
    with patch("app.chat.actions.fetch_interactions", return_value=empty) as fetch:
        resp = _run(actions, f"last 10 trades in the last 500 hours {ADDR} testnet")

    assert fetch.call_args.kwargs["hours"] == 168
    assert fetch.call_args.kwargs["limit"] == 10
    assert resp.response == f"No recent trades found for {ADDR} on testnet in last 168h."


def test_todo_add_without_task_asks_for_one(actions):
    resp = _run(actions, "add a todo")
    assert resp.success is True
    assert resp.response.startswith("📝 What should I add")


def test_todo_list_empty(actions):
    resp = _run(actions, "list todos")
    assert resp.response == "📝 No todos yet."


def test_handler_exception_becomes_action_failed(actions, fake_wallet):
    def boom():
        raise RuntimeError("rpc down")

    fake_wallet.get_sei_balance = boom
    resp = _run(actions, "check my balance")
    assert resp.success is False
    assert resp.response == "❌ Action failed: rpc down"
