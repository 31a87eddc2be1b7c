from __future__ import annotations

from typing import Any

from web3 import Web3

from app.config import get_settings
from chain import rpc
from chain.chains import get_network
from defi.router_v2 import NATIVE_DECIMALS, from_base_units
from tools.tool_runner import run_tool


def known_tokens(network: str) -> dict[str, str]:
    """
    Symbol -> ERC20 address for the tokens a portfolio can report on.
    """
    s = get_settings()
    return {
        "USDC": s.usdc_address(network),
        "WSEI": s.wsei_address(network),
    }


def fetch_portfolio(
    *,
    network: str,
    address: str,
    include_symbols: list[str] | None = None,
) -> dict[str, Any]:
    """
    Native SEI balance plus the balances of the requested known tokens.

    Unknown symbols are skipped. Balances are decimal strings in whole units.
    """
    net = get_network(network)
    wallet = Web3.to_checksum_address(address)

    native_wei = run_tool(
        tool_name="web3.eth_getBalance",
        request={"network": net.name, "address": wallet},
        fn=lambda: int(rpc.get_native_balance(net.name, wallet)),
    )

    tokens = known_tokens(net.name)
    rows: list[dict[str, Any]] = []
    for symbol in include_symbols or []:
        symbol = symbol.strip().upper()
        token = tokens.get(symbol)
        if not token:
            continue
        token_cs = Web3.to_checksum_address(token)

        raw = run_tool(
            tool_name="web3.erc20.balanceOf",
            request={"network": net.name, "token": token_cs, "owner": wallet},
            fn=lambda token_addr=token_cs: int(rpc.erc20_balance(net.name, token_addr, wallet)),
        )
        decimals = rpc.erc20_decimals(net.name, token_cs)

        rows.append(
            {
                "symbol": symbol,
                "address": token_cs,
                "decimals": decimals,
                "balance": str(from_base_units(raw, decimals)),
            }
        )

    return {
        "address": wallet,
        "network": net.name,
        "chainId": net.chain_id,
        "native": {
            "symbol": "SEI",
            "balanceWei": str(native_wei),
            "balance": str(from_base_units(native_wei, NATIVE_DECIMALS)),
        },
        "tokens": rows,
    }
