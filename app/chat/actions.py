from __future__ import annotations

import logging
import math
import re
from decimal import Decimal, ROUND_DOWN
from typing import Any, Callable

from sqlalchemy.orm import Session

from app.chat.contracts import ActionResponse, IntentResult, IntentType, PendingSwap, PendingTransfer
from app.chat.intents import ADDRESS_RE, extract_token_name
from app.chat.knowledge import lookup as lookup_knowledge
from app.config import get_settings
from chain.interactions import clamp_hours, fetch_interactions
from chain.rpc import Web3RPCError
from chain.snapshot import fetch_portfolio
from chain.wallet import SeiWallet, get_wallet
from db.repos.memory_repo import get_or_create_memory, save_memory
from db.repos.todos_repo import add_todo, list_todos
from defi import fixed_rate
from defi.router_v2 import SwapRouteError, get_quote, is_native
from token_risk import TokenScanner

logger = logging.getLogger(__name__)

RECIPIENT_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_HOURS_RE = re.compile(r"last\s+(\d{1,3})\s*hours?")
_TRADES_RE = re.compile(r"\blast(?:\s+(\d+|ten))?\s+trades?\b|\blatest\s+trades?\b")
_TODO_STRIP_RE = re.compile(r"\b(remind me to|add|create|make|todos?|tasks?)\b", re.IGNORECASE)
_TODO_TAIL_RE = re.compile(r"\s*\bto\s+(my|the)\s*$", re.IGNORECASE)
_TODO_LEAD_RE = re.compile(r"^(?:(?:a|an|the|new|to)\b\s*)+", re.IGNORECASE)

DEFAULT_TOKEN_SUPPLY = 1_000_000
MAX_TRADES = 100
TODO_LIST_LIMIT = 10
WATCHLIST_LIMIT = 50

CAPABILITIES_TEXT = (
    "👋 I can scan tokens, create tokens, swap, check balances, and transfer SEI. "
    "Tell me what you'd like to do."
)
HELP_TEXT = (
    "I'm here to help. Try: \"Scan 0x...\", \"Create a token called BlueFox\", "
    "\"Swap 10 SEI to USDC\", or \"Send 0.1 SEI to 0x...\""
)
CONFIRM_SWAP_TEXT = 'Say "Yes" to execute or "Cancel" to abort.'
CONFIRM_TRANSFER_TEXT = 'Reply: "Yes" to confirm or "Cancel"'

_PROTOCOL_ACTIONS: dict[IntentType, tuple[str, str, str]] = {
    # intent: (verb, emoji, title)
    IntentType.STAKE_TOKENS: ("stake", "🥩", "Staking"),
    IntentType.UNSTAKE_TOKENS: ("unstake", "🔓", "Unstaking"),
    IntentType.LEND_TOKENS: ("lend", "🏦", "Lending"),
    IntentType.BORROW_TOKENS: ("borrow", "💳", "Borrowing"),
    IntentType.REPAY_LOAN: ("repay", "💸", "Loan Repayment"),
}


def format_amount(value: float | Decimal | str) -> str:
    """
    Plain decimal string without exponent or trailing zeros.
    """
    dec = Decimal(str(value)).normalize()
    text = format(dec, "f")
    return text


def _fail(message: str) -> ActionResponse:
    return ActionResponse(success=False, response=message)


class ActionBrain:
    """
    Executes a recognized intent against the wallet, DEX router, scanner and storage.
    """

    def __init__(
        self,
        db: Session,
        *,
        wallet_provider: Callable[[], SeiWallet] | None = None,
        scanner: TokenScanner | None = None,
    ) -> None:
        self.db = db
        self._wallet_provider = wallet_provider
        self._scanner = scanner
        self.settings = get_settings()

    @property
    def wallet(self) -> SeiWallet:
        return (self._wallet_provider or get_wallet)()

    @property
    def scanner(self) -> TokenScanner:
        if self._scanner is None:
            self._scanner = TokenScanner()
        return self._scanner

    def execute_action(self, intent_result: IntentResult, *, session_id: str) -> ActionResponse:
        handlers: dict[IntentType, Callable[[], ActionResponse]] = {
            IntentType.SYMPHONY_SWAP: lambda: self.execute_swap(intent_result),
            IntentType.TOKEN_CREATE: lambda: self.execute_token_create(intent_result),
            IntentType.TOKEN_SCAN: lambda: self.execute_token_scan(intent_result, session_id=session_id),
            IntentType.BALANCE_CHECK: self.execute_balance_check,
            IntentType.SEND_TOKENS: lambda: self.execute_send_tokens(intent_result),
            IntentType.TODO_ADD: lambda: self.execute_todo_add(intent_result, session_id=session_id),
            IntentType.TODO_LIST: lambda: self.execute_todo_list(session_id=session_id),
            IntentType.WALLET_INFO: lambda: self.execute_wallet_watch(intent_result.raw_message),
            IntentType.PROTOCOL_DATA: lambda: self.execute_wallet_watch(intent_result.raw_message),
            IntentType.CONVERSATION: lambda: ActionResponse(success=True, response=CAPABILITIES_TEXT),
        }
        handler = handlers.get(intent_result.intent)
        if handler is None and intent_result.intent in _PROTOCOL_ACTIONS:
            handler = lambda: self.execute_protocol_action(intent_result)  # noqa: E731
        if handler is None:
            handler = lambda: self.execute_unknown(intent_result)  # noqa: E731

        try:
            return handler()
        except Exception as e:
            logger.warning("action failed intent=%s error=%s", intent_result.intent.value, e)
            return _fail(f"❌ Action failed: {e}")

    # ---------------------------
    # Swaps
    # ---------------------------

    def execute_swap(self, intent: IntentResult) -> ActionResponse:
        e = intent.entities
        if not e.token_in or not e.token_out:
            return _fail('🔄 Please specify both input and output tokens. Example: "Swap 10 SEI to USDC"')
        amount = e.amount
        if amount is None or not math.isfinite(amount) or amount <= 0:
            return _fail('❌ Missing or invalid amount. Example: "Swap 10 SEI to USDC"')

        amount_str = format_amount(amount)
        network = self.settings.sei_network
        try:
            quote = get_quote(network, token_in=e.token_in, token_out=e.token_out, amount=amount_str)
        except (SwapRouteError, Web3RPCError, ValueError) as exc:
            logger.info("router quote unavailable, trying fixed rate: %s", exc)
            return self._fixed_rate_quote(amount_str, e.token_in, e.token_out)

        max_impact = self.settings.swap_max_price_impact_pct
        if quote.price_impact_pct > max_impact:
            return _fail(
                f"🚫 High price impact ({quote.price_impact_pct:.2f}%). "
                "Try a smaller amount or different pair."
            )

        pending = PendingSwap(
            amount=amount_str,
            token_in=e.token_in,
            token_out=e.token_out,
            min_out=format_amount(quote.min_out),
        )
        response = (
            "✅ Quote\n"
            f"• In: {amount_str} {self._display_token(e.token_in)}\n"
            f"• Expected Out: {format_amount(quote.amount_out)} {self._display_token(e.token_out)}\n"
            f"• Impact: {quote.price_impact_pct:.2f}%\n"
            f"• Min Out (@{self._slippage_label()}): {pending.min_out}\n\n"
            f"{CONFIRM_SWAP_TEXT}"
        )
        return ActionResponse(
            success=True,
            response=response,
            data={"pending_swap": pending.model_dump(), "quote": quote.to_dict()},
        )

    def _fixed_rate_quote(self, amount_str: str, token_in: str, token_out: str) -> ActionResponse:
        usdc = self.settings.usdc_address(self.settings.sei_network).lower()
        out: Decimal | None = None
        in_symbol = out_symbol = ""
        try:
            if is_native(token_in) and token_out.lower() == usdc:
                out, in_symbol, out_symbol = fixed_rate.quote_sei_to_usdc(amount_str), "SEI", "USDC"
            elif token_in.lower() == usdc and is_native(token_out):
                out, in_symbol, out_symbol = fixed_rate.quote_usdc_to_sei(amount_str), "USDC", "SEI"
        except fixed_rate.FixedRateUnavailableError as exc:
            logger.info("fixed-rate quote unavailable: %s", exc)

        if out is None or out <= 0:
            return _fail(
                "❌ No liquidity or route found for this pair/amount on current router. "
                "Try a smaller amount or different pair."
            )

        bps = self.settings.swap_slippage_bps
        min_out = (out * (10_000 - bps) / 10_000).quantize(fixed_rate.USDC_QUANT, rounding=ROUND_DOWN)
        pending = PendingSwap(
            amount=amount_str,
            token_in=token_in,
            token_out=token_out,
            min_out=format_amount(min_out),
        )
        response = (
            "✅ Quote\n"
            f"• In: {amount_str} {in_symbol}\n"
            f"• Expected Out: {format_amount(out)} {out_symbol}\n"
            f"• Min Out (@{self._slippage_label()}): {pending.min_out}\n\n"
            f"{CONFIRM_SWAP_TEXT}"
        )
        return ActionResponse(
            success=True,
            response=response,
            data={"pending_swap": pending.model_dump(), "quote": {"source": "fixed"}},
        )

    def _slippage_label(self) -> str:
        return f"{format_amount(Decimal(self.settings.swap_slippage_bps) / 100)}%"

    def _display_token(self, token: str) -> str:
        if is_native(token):
            return "SEI"
        if token.lower() == self.settings.usdc_address(self.settings.sei_network).lower():
            return "USDC"
        return token

    # ---------------------------
    # Transfers
    # ---------------------------

    def execute_send_tokens(self, intent: IntentResult) -> ActionResponse:
        amount = intent.entities.transfer_amount
        recipient = intent.entities.recipient
        if not amount or not recipient:
            return _fail('❌ Missing transfer details. Usage: "Send 0.1 SEI to 0x..."')
        if not RECIPIENT_RE.match(recipient):
            return _fail(f"❌ Invalid recipient address: {recipient}")

        wallet = self.wallet
        if re.search(r"\busdc\b", intent.raw_message.lower()):
            symbol, places = "USDC", Decimal("0.01")
            current = Decimal(wallet.get_usdc_balance()["balance"])
            token = wallet.usdc_address
        else:
            symbol, places = "SEI", Decimal("0.0001")
            current = Decimal(wallet.get_sei_balance()["sei"])
            token = None

        remaining = current - Decimal(str(amount))
        if remaining < 0:
            return _fail(f"❌ Insufficient {symbol} balance. You have {current.quantize(places)} {symbol}.")

        pending = PendingTransfer(
            amount=amount,
            recipient=recipient,
            current_balance=str(current.quantize(places)),
            remaining_balance=str(remaining.quantize(places)),
            token=token,
        )
        title = "💸 USDC Transfer Confirmation Required" if token else "💸 Transfer Confirmation Required"
        response = (
            f"{title}\n"
            f"• Amount: {format_amount(amount)} {symbol}\n"
            f"• Recipient: {recipient}\n"
            f"• Current: {pending.current_balance} {symbol}\n"
            f"• After: {pending.remaining_balance} {symbol}\n\n"
            f"{CONFIRM_TRANSFER_TEXT}"
        )
        return ActionResponse(
            success=True,
            response=response,
            data={"pending_transfer": pending.model_dump()},
        )

    # ---------------------------
    # Token creation / scanning
    # ---------------------------

    def execute_token_create(self, intent: IntentResult) -> ActionResponse:
        name = intent.entities.token_name or extract_token_name(intent.raw_message)
        if not name:
            return _fail('🚀 Token Creation\nUsage: "Create a token called MyToken"')

        # optional wizard: "...called Foo: supply, lock USD, website, twitter"
        tail = intent.raw_message.split(":", 1)[1] if ":" in intent.raw_message else ""
        parts = [p.strip() for p in tail.split(",") if p.strip()]
        total_supply = DEFAULT_TOKEN_SUPPLY
        if parts and parts[0][0].isdigit():
            digits = re.match(r"\d+", parts[0].replace("_", ""))
            total_supply = max(1, int(digits.group(0))) if digits else DEFAULT_TOKEN_SUPPLY
        lock_usd = parts[1] if len(parts) >= 2 else "0"
        website = parts[2] if len(parts) >= 3 else ""
        twitter = parts[3] if len(parts) >= 4 else ""

        symbol = re.sub(r"[^A-Za-z]", "", name)[:5].upper() or name[:5].upper()
        try:
            created = self.wallet.create_token(name, symbol, total_supply)
        except Web3RPCError as exc:
            return _fail(f"❌ Creation Failed: {exc}")

        follow_up: list[str] = []
        if not website or not twitter:
            follow_up.append(
                "Provide: total supply, lock USD, website, twitter (comma-separated) to update metadata later."
            )
        response = (
            "✅ Token Created\n"
            f"• Name: {name}\n"
            f"• Symbol: {symbol}\n"
            f"• Supply: {total_supply:,}\n"
            f"• Tx: `{created['txHash']}`"
        )
        return ActionResponse(
            success=True,
            response=response,
            data={
                "token": {
                    **created,
                    "name": name,
                    "symbol": symbol,
                    "totalSupply": str(total_supply),
                    "lockUsd": lock_usd,
                    "website": website,
                    "twitter": twitter,
                }
            },
            follow_up=follow_up,
        )

    def execute_token_scan(self, intent: IntentResult, *, session_id: str) -> ActionResponse:
        address = intent.entities.token_address
        if not address:
            return _fail("❌ No valid token address found (0x...)")
        try:
            report = self.scanner.analyze(address, network=self.settings.sei_network)
        except Web3RPCError as exc:
            return _fail(f"❌ Scan Failed: {exc}")

        info = report.basic_info
        lines = [
            "🔍 Token Scan",
            f"**Token**: {info.name or 'Unknown'} ({info.symbol or '?'})",
            f"**Contract**: `{report.address}`",
            f"**Safety Score**: {report.security_score}/100",
            f"**Risk Level**: {report.risk_level.value}",
        ]
        if report.warnings:
            lines.append("**Warnings**:")
            lines.extend(f"• {w}" for w in report.warnings)
        lines.append(f"\n{report.recommendation}")

        self._add_to_watchlist(session_id, report.address, info.symbol, report.security_score)
        return ActionResponse(success=True, response="\n".join(lines), data={"analysis": report.to_dict()})

    def _add_to_watchlist(self, session_id: str, address: str, symbol: str | None, score: int) -> None:
        memory = get_or_create_memory(self.db, session_id=session_id)
        watchlist = [w for w in memory.watchlist if w.get("address", "").lower() != address.lower()]
        watchlist.insert(0, {"address": address, "symbol": symbol, "securityScore": score})
        save_memory(self.db, memory, watchlist=watchlist[:WATCHLIST_LIMIT])

    # ---------------------------
    # Balances / wallet watch
    # ---------------------------

    def execute_balance_check(self) -> ActionResponse:
        wallet = self.wallet
        bal = wallet.get_sei_balance()
        response = (
            "💰 Wallet Balance\n"
            f"• Amount: {bal['sei']} SEI\n"
            f"• USD Value: ${bal['usd']:.2f}\n"
            f"• Address: `{wallet.address}`"
        )
        return ActionResponse(success=True, response=response, data={"balance": bal, "address": wallet.address})

    def execute_wallet_watch(self, message: str) -> ActionResponse:
        m = ADDRESS_RE.search(message)
        if not m:
            return _fail("Provide a wallet address (0x...)")
        address = m.group(0)
        normalized = message.lower()
        network = "testnet" if re.search(r"\btestnet\b", normalized) and not re.search(r"\bmainnet\b", normalized) else "mainnet"

        hours_match = _HOURS_RE.search(normalized)
        hours = clamp_hours(int(hours_match.group(1))) if hours_match else None
        trades_match = _TRADES_RE.search(normalized)

        try:
            if trades_match or hours:
                return self._recent_trades(address, network, trades_match, hours)
            portfolio = fetch_portfolio(network=network, address=address, include_symbols=["SEI", "USDC"])
        except Web3RPCError as exc:
            return _fail(f"Failed to fetch wallet info: {exc}")

        usdc = next((t["balance"] for t in portfolio["tokens"] if t["symbol"] == "USDC"), "0")
        response = (
            f"👛 Wallet {address}\n"
            f"• Network: {network}\n"
            f"• SEI: {portfolio['native']['balance']}\n"
            f"• USDC: {usdc}"
        )
        return ActionResponse(success=True, response=response, data={"portfolio": portfolio})

    def _recent_trades(
        self,
        address: str,
        network: str,
        trades_match: re.Match | None,
        hours: int | None,
    ) -> ActionResponse:
        count = trades_match.group(1) if trades_match else None
        if count == "ten":
            limit = 10
        elif count:
            limit = min(int(count), MAX_TRADES)
        elif hours:
            limit = MAX_TRADES
        elif trades_match and "latest" in trades_match.group(0):
            limit = 1
        else:
            limit = 10

        data = fetch_interactions(
            network=network,
            address=address,
            limit=limit,
            include_native=True,
            native_blocks=800,
            hours=hours,
        )
        combined: list[dict[str, Any]] = [{"type": "erc20", **t} for t in data["transfers"]]
        combined += [{"type": "native", **n} for n in data["native"]]
        combined.sort(key=lambda t: t.get("blockNumber") or 0, reverse=True)
        combined = combined[:limit]

        window = f" in last {hours}h" if hours else ""
        if not combined:
            return ActionResponse(
                success=True,
                response=f"No recent trades found for {address} on {network}{window}.",
                data=data,
            )

        def _line(i: int, t: dict[str, Any]) -> str:
            arrow = "➡️" if str(t.get("from", "")).lower() == address.lower() else "⬅️"
            tx = f"[{t['txHash'][:8]}...]"
            if t["type"] == "native":
                return f"{i}. Native {Decimal(t['value']):.4f} SEI {arrow} {t['to']} {tx}"
            return f"{i}. ERC20 {t['amount']} @ {t['token']} {arrow} {t['to']} {tx}"

        lines = [_line(i, t) for i, t in enumerate(combined, start=1)]
        header = f"🧾 Recent {len(combined)} transfer(s) for {address} on {network}"
        if hours:
            header += f" (last {hours}h)"
        return ActionResponse(success=True, response=header + "\n" + "\n".join(lines), data=data)

    # ---------------------------
    # Protocol actions
    # ---------------------------

    def execute_protocol_action(self, intent: IntentResult) -> ActionResponse:
        verb, emoji, title = _PROTOCOL_ACTIONS[intent.intent]
        amount = intent.entities.amount
        token = "USDC" if re.search(r"\busdc\b", intent.raw_message.lower()) else "SEI"
        if amount is None or not math.isfinite(amount) or amount <= 0:
            return _fail(f'❌ Missing or invalid amount. Example: "{verb.capitalize()} 10 {token}"')

        if intent.intent == IntentType.STAKE_TOKENS:
            balance = Decimal(self.wallet.get_sei_balance()["sei"])
            if balance < Decimal(str(amount)):
                return _fail(f"❌ Insufficient SEI balance. You have {balance} SEI.")

        network = self.settings.sei_network
        response = (
            f"{emoji} {title} Preview\n"
            f"• Amount: {format_amount(amount)} {token}\n"
            f"• Network: {network}\n\n"
            f"⏳ {title} protocol integration is pending on {network}. No transaction was sent."
        )
        return ActionResponse(
            success=True,
            response=response,
            data={"protocol_action": verb, "amount": format_amount(amount), "token": token, "network": network},
        )

    # ---------------------------
    # Todos
    # ---------------------------

    def execute_todo_add(self, intent: IntentResult, *, session_id: str) -> ActionResponse:
        task = _TODO_STRIP_RE.sub(" ", intent.raw_message)
        task = re.sub(r"\s+", " ", task).strip(" :-")
        task = _TODO_TAIL_RE.sub("", task).strip()
        task = _TODO_LEAD_RE.sub("", task).strip()
        if not task:
            return ActionResponse(
                success=True,
                response='📝 What should I add to your TODOs? You can say: "Remind me to check liquidity at 5pm"',
            )
        todo = add_todo(self.db, session_id=session_id, task=task)
        return ActionResponse(success=True, response=f"✅ Added to your todo: {task}", data={"todo_id": todo.id})

    def execute_todo_list(self, *, session_id: str) -> ActionResponse:
        todos = list_todos(self.db, session_id=session_id, limit=TODO_LIST_LIMIT)
        if not todos:
            return ActionResponse(success=True, response="📝 No todos yet.")
        lines = [f"{i}. {'✅ ' if t.completed else ''}{t.task}" for i, t in enumerate(todos, start=1)]
        return ActionResponse(success=True, response="📝 Your Todos\n" + "\n".join(lines))

    # ---------------------------
    # Fallback
    # ---------------------------

    def execute_unknown(self, intent: IntentResult) -> ActionResponse:
        entry = lookup_knowledge(intent.raw_message)
        if entry:
            return ActionResponse(success=True, response=entry.message, data={"suggestions": entry.suggestions})
        return ActionResponse(success=True, response=HELP_TEXT)
