from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any

from eth_abi import decode as decode_abi
from web3 import Web3

from app.config import get_settings
from chain import rpc

NATIVE_TOKEN = "0x0"
NATIVE_DECIMALS = 18

# price impact is measured against a quote for 1/REFERENCE_DIVISOR of the amount
REFERENCE_DIVISOR = 1000


UNISWAP_V2_ROUTER_ABI: list[dict[str, Any]] = [
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "swapExactETHForTokens",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "swapExactTokensForTokens",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "swapExactTokensForETH",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]


class SwapRouteError(RuntimeError):
    pass


@dataclass
class SwapQuote:
    token_in: str
    token_out: str
    amount_in: str
    amount_in_base_units: int
    amount_out_base_units: int
    amount_out: Decimal
    min_out: Decimal
    price_impact_pct: float
    slippage_bps: int
    router: str | None = None
    path: list[str] = field(default_factory=list)
    source: str = "router"

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "amountIn": self.amount_in,
            "amountOut": str(self.amount_out),
            "minOut": str(self.min_out),
            "priceImpactPct": self.price_impact_pct,
            "slippageBps": self.slippage_bps,
            "router": self.router,
            "path": self.path,
            "source": self.source,
        }


def is_native(token: str) -> bool:
    return token.strip().lower() == NATIVE_TOKEN


def to_base_units(amount_str: str, decimals: int) -> int:
    try:
        dec = Decimal(str(amount_str))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid amount: {amount_str}") from exc
    if not dec.is_finite() or dec <= 0:
        raise ValueError(f"amount must be positive: {amount_str}")
    quant = Decimal(10) ** decimals
    base_units = int((dec * quant).to_integral_value(rounding=ROUND_DOWN))
    if base_units <= 0:
        raise ValueError("amount too small after decimals conversion")
    return base_units


def from_base_units(value: int, decimals: int) -> Decimal:
    return Decimal(int(value)) / (Decimal(10) ** decimals)


def apply_slippage(amount_out: int, slippage_bps: int) -> int:
    if not 0 <= slippage_bps < 10_000:
        raise ValueError(f"invalid slippage bps: {slippage_bps}")
    return int(amount_out) * (10_000 - int(slippage_bps)) // 10_000


def price_impact_pct(amount_in: int, amount_out: int, ref_in: int, ref_out: int) -> float:
    """
    Percentage shortfall of the realised rate versus the rate of a small reference trade.
    """
    if amount_in <= 0 or ref_in <= 0 or ref_out <= 0:
        return 0.0
    spot = Decimal(ref_out) / Decimal(ref_in)
    realised = Decimal(amount_out) / Decimal(amount_in)
    impact = (spot - realised) / spot * 100
    return max(float(impact), 0.0)


def token_decimals(network: str, token: str) -> int:
    if is_native(token):
        return NATIVE_DECIMALS
    return rpc.erc20_decimals(network, Web3.to_checksum_address(token))


def build_path(network: str, token_in: str, token_out: str) -> list[str]:
    """
    Native SEI legs are routed through WSEI.
    """
    wsei = get_settings().wsei_address(network)

    def _leg(token: str) -> str:
        return Web3.to_checksum_address(wsei if is_native(token) else token)

    path = [_leg(token_in), _leg(token_out)]
    if path[0] == path[1]:
        raise SwapRouteError("token_in and token_out resolve to the same asset")
    return path


def router_address() -> str:
    address = get_settings().dex_router_address
    if not address:
        raise SwapRouteError("no DEX router configured")
    return Web3.to_checksum_address(address)


def _router_contract(address: str):
    w3 = Web3()
    return w3.eth.contract(address=Web3.to_checksum_address(address), abi=UNISWAP_V2_ROUTER_ABI)


def _encode_get_amounts_out(router: str, amount_in: int, path: list[str]) -> str:
    contract = _router_contract(router)
    return contract.encode_abi("getAmountsOut", args=[int(amount_in), path])


def _decode_amounts_out(output: bytes | str) -> list[int]:
    if isinstance(output, str):
        data = output[2:] if output.startswith("0x") else output
        output = bytes.fromhex(data)
    if not output:
        raise SwapRouteError("empty getAmountsOut response")
    decoded = decode_abi(["uint256[]"], bytes(output))[0]
    return [int(x) for x in decoded]


def get_amounts_out(network: str, router: str, amount_in: int, path: list[str]) -> list[int]:
    call_data = _encode_get_amounts_out(router, amount_in, path)
    try:
        raw = rpc.eth_call(network, {"to": router, "data": call_data})
    except rpc.Web3RPCError as e:
        raise SwapRouteError(f"getAmountsOut failed: {e}") from e
    return _decode_amounts_out(raw)


def get_quote(
    network: str,
    *,
    token_in: str,
    token_out: str,
    amount: str,
    slippage_bps: int | None = None,
) -> SwapQuote:
    settings = get_settings()
    if slippage_bps is None:
        slippage_bps = settings.swap_slippage_bps

    router = router_address()
    path = build_path(network, token_in, token_out)
    decimals_in = token_decimals(network, token_in)
    decimals_out = token_decimals(network, token_out)

    amount_in = to_base_units(amount, decimals_in)
    amount_out = get_amounts_out(network, router, amount_in, path)[-1]
    if amount_out <= 0:
        raise SwapRouteError("router returned zero output")

    ref_in = max(amount_in // REFERENCE_DIVISOR, 1)
    ref_out = get_amounts_out(network, router, ref_in, path)[-1]
    impact = price_impact_pct(amount_in, amount_out, ref_in, ref_out)

    return SwapQuote(
        token_in=token_in,
        token_out=token_out,
        amount_in=str(amount),
        amount_in_base_units=amount_in,
        amount_out_base_units=amount_out,
        amount_out=from_base_units(amount_out, decimals_out),
        min_out=from_base_units(apply_slippage(amount_out, slippage_bps), decimals_out),
        price_impact_pct=round(impact, 4),
        slippage_bps=slippage_bps,
        router=router,
        path=path,
    )


def encode_swap(
    *,
    router: str,
    token_in: str,
    token_out: str,
    amount_in: int,
    min_out: int,
    path: list[str],
    recipient: str,
    deadline: int,
) -> tuple[str, int]:
    """
    Returns (calldata, value_wei) for the router call matching the pair.
    """
    contract = _router_contract(router)
    to = Web3.to_checksum_address(recipient)

    if is_native(token_in):
        data = contract.encode_abi(
            "swapExactETHForTokens", args=[int(min_out), path, to, int(deadline)]
        )
        return data, int(amount_in)

    fn_name = "swapExactTokensForETH" if is_native(token_out) else "swapExactTokensForTokens"
    data = contract.encode_abi(
        fn_name, args=[int(amount_in), int(min_out), path, to, int(deadline)]
    )
    return data, 0
