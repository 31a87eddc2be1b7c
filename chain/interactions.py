from __future__ import annotations

import logging
import math
from typing import Any

from web3 import Web3

from app.config import get_settings
from chain import rpc
from chain.chains import get_network
from defi.router_v2 import NATIVE_DECIMALS, from_base_units
from tools.tool_runner import run_tool

logger = logging.getLogger(__name__)

MIN_HOURS = 1
MAX_HOURS = 168


def clamp_hours(hours: int | None) -> int | None:
    if hours is None:
        return None
    return max(MIN_HOURS, min(MAX_HOURS, int(hours)))


def _topic_address(topic: Any) -> str:
    return Web3.to_checksum_address("0x" + Web3.to_hex(topic)[-40:])


def _log_amount(data: Any) -> int:
    hex_data = Web3.to_hex(data) if not isinstance(data, str) else data
    if hex_data in ("0x", ""):
        return 0
    return int(hex_data, 16)


def _token_amount(network: str, token: str, raw: int) -> str:
    try:
        decimals = rpc.erc20_decimals(network, token)
    except rpc.Web3RPCError:
        return str(raw)
    return str(from_base_units(raw, decimals))


def parse_transfer_log(network: str, entry: dict[str, Any]) -> dict[str, Any] | None:
    topics = entry.get("topics") or []
    if len(topics) < 3:
        return None
    token = Web3.to_checksum_address(entry["address"])
    raw = _log_amount(entry.get("data"))
    return {
        "token": token,
        "from": _topic_address(topics[1]),
        "to": _topic_address(topics[2]),
        "amount": _token_amount(network, token, raw),
        "rawAmount": str(raw),
        "txHash": Web3.to_hex(entry["transactionHash"]),
        "blockNumber": int(entry["blockNumber"]),
    }


def _native_transfers(network: str, wallet: str, from_block: int, to_block: int) -> list[dict[str, Any]]:
    wallet_lc = wallet.lower()
    found: list[dict[str, Any]] = []
    for block_number in range(to_block, from_block - 1, -1):
        for tx in rpc.get_block_transactions(network, block_number):
            value = int(tx.get("value") or 0)
            sender = str(tx.get("from") or "")
            recipient = str(tx.get("to") or "")
            if value <= 0:
                continue
            if wallet_lc not in (sender.lower(), recipient.lower()):
                continue
            found.append(
                {
                    "from": sender,
                    "to": recipient,
                    "value": str(from_base_units(value, NATIVE_DECIMALS)),
                    "txHash": Web3.to_hex(tx["hash"]),
                    "blockNumber": block_number,
                }
            )
    return found


def _erc20_transfers(
    network: str,
    wallet: str,
    from_block: int,
    to_block: int,
    *,
    chunk: int,
    limit: int,
) -> list[dict[str, Any]]:
    """
    Transfer logs paged newest chunk first. Stops once `limit` transfers are collected.
    """
    found: list[dict[str, Any]] = []
    hi = to_block
    while hi >= from_block and len(found) < limit:
        lo = max(from_block, hi - chunk + 1)
        logs = rpc.get_transfer_logs(network, address=wallet, from_block=lo, to_block=hi)
        found.extend(t for t in (parse_transfer_log(network, e) for e in logs) if t)
        hi = lo - 1
    return found


def fetch_interactions(
    *,
    network: str,
    address: str,
    limit: int = 10,
    include_native: bool = False,
    native_blocks: int = 800,
    hours: int | None = None,
) -> dict[str, Any]:
    """
    Recent ERC20 Transfer events and, optionally, native SEI transfers for an address.

    With `hours` the log window covers that many hours of blocks, read in pages of
    max_log_block_range. Without it the window is a single page.
    Native transfers are scanned over the last `native_blocks` blocks.
    """
    s = get_settings()
    net = get_network(network)
    wallet = Web3.to_checksum_address(address)
    hours = clamp_hours(hours)

    latest = run_tool(
        tool_name="web3.eth_blockNumber",
        request={"network": net.name},
        fn=lambda: rpc.get_block_number(net.name),
    )

    chunk = max(int(s.max_log_block_range), 1)
    span = chunk
    if hours is not None:
        span = math.ceil(hours * 3600 / s.sei_block_time_s)
    from_block = max(latest - span + 1, 0)

    transfers = run_tool(
        tool_name="web3.eth_getLogs",
        request={"network": net.name, "address": wallet, "fromBlock": from_block, "toBlock": latest},
        fn=lambda: _erc20_transfers(net.name, wallet, from_block, latest, chunk=chunk, limit=limit),
    )
    transfers.sort(key=lambda t: t["blockNumber"], reverse=True)

    native: list[dict[str, Any]] = []
    if include_native:
        native_from = max(latest - max(int(native_blocks), 0), 0)
        if hours is not None:
            native_from = max(native_from, from_block)
        native = run_tool(
            tool_name="web3.eth_getBlock",
            request={"network": net.name, "fromBlock": native_from, "toBlock": latest},
            fn=lambda: _native_transfers(net.name, wallet, native_from, latest),
        )

    logger.info(
        "interactions network=%s erc20=%s native=%s", net.name, len(transfers), len(native)
    )
    return {
        "address": wallet,
        "network": net.name,
        "fromBlock": from_block,
        "toBlock": latest,
        "hours": hours,
        "transfers": transfers[:limit],
        "native": native[:limit],
    }
