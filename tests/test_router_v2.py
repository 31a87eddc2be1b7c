from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest
from eth_abi import encode as encode_abi
from web3 import Web3

from defi.router_v2 import (
    NATIVE_TOKEN,
    SwapRouteError,
    apply_slippage,
    build_path,
    encode_swap,
    get_quote,
    price_impact_pct,
    to_base_units,
)

ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
WSEI_TESTNET = Web3.to_checksum_address("0x027d2e627209f1ceba52adc8a5afe9318459b44b")
USDC_TESTNET = Web3.to_checksum_address("0x948dff0c876ebeb1e233f9af8df81c23d4e068c6")


def test_to_base_units_rounds_down():
    assert to_base_units("1.5", 6) == 1_500_000
    assert to_base_units("0.0000019", 6) == 1


@pytest.mark.parametrize("bad", ["0", "-1", "abc", "nan", "0.0000001"])
def test_to_base_units_rejects_bad_amounts(bad):
    with pytest.raises(ValueError):
        to_base_units(bad, 6)


def test_apply_slippage():
    assert apply_slippage(1_000_000, 100) == 990_000
    assert apply_slippage(1_000_000, 0) == 1_000_000
    with pytest.raises(ValueError):
        apply_slippage(1_000_000, 10_000)


def test_price_impact_against_small_reference_quote():
    # the reference quote gets 2 out per 1 in, the full trade only 1.9
    assert price_impact_pct(1000, 1900, 1, 2) == pytest.approx(5.0)
    assert price_impact_pct(1000, 2100, 1, 2) == 0.0
    assert price_impact_pct(0, 0, 0, 0) == 0.0


def test_build_path_routes_native_through_wsei():
    assert build_path("testnet", NATIVE_TOKEN, USDC_TESTNET) == [WSEI_TESTNET, USDC_TESTNET]
    with pytest.raises(SwapRouteError):
        build_path("testnet", NATIVE_TOKEN, WSEI_TESTNET)


def test_encode_swap_native_in_carries_value():
    data, value = encode_swap(
        router=ROUTER,
        token_in=NATIVE_TOKEN,
        token_out=USDC_TESTNET,
        amount_in=10**18,
        min_out=1,
        path=[WSEI_TESTNET, USDC_TESTNET],
        recipient="0x1111111111111111111111111111111111111111",
        deadline=1_700_000_000,
    )
    assert value == 10**18
    # swapExactETHForTokens(uint256,address[],address,uint256)
    assert data.startswith("0x7ff36ab5")


def test_encode_swap_token_in_has_no_value():
    data, value = encode_swap(
        router=ROUTER,
        token_in=USDC_TESTNET,
        token_out=NATIVE_TOKEN,
        amount_in=10**6,
        min_out=1,
        path=[USDC_TESTNET, WSEI_TESTNET],
        recipient="0x1111111111111111111111111111111111111111",
        deadline=1_700_000_000,
    )
    assert value == 0
    # swapExactTokensForETH(uint256,uint256,address[],address,uint256)
    assert data.startswith("0x18cbafe5")


def test_get_quote_without_router_raises():
    with pytest.raises(SwapRouteError):
        get_quote("testnet", token_in=NATIVE_TOKEN, token_out=USDC_TESTNET, amount="1")


def test_get_quote_decodes_amounts_and_applies_slippage(monkeypatch):
    monkeypatch.setenv("DEX_ROUTER_ADDRESS", ROUTER)
    from app.config import get_settings

    get_settings.cache_clear()

    # full trade: 10 SEI -> 5 USDC, then the reference quote: 0.01 SEI -> 0.005 USDC
    responses = [encode_abi(["uint256[]"], [[0, out]]) for out in (5_000_000, 5_000)]

    with (
        patch("chain.rpc.eth_call", side_effect=responses),
        patch("chain.rpc.erc20_decimals", return_value=6),
    ):
        quote = get_quote("testnet", token_in=NATIVE_TOKEN, token_out=USDC_TESTNET, amount="10")

    assert quote.amount_in_base_units == 10 * 10**18
    assert quote.amount_out == Decimal("5")
    assert quote.min_out == Decimal("4.95")
    assert quote.price_impact_pct == 0.0
    assert quote.path == [WSEI_TESTNET, USDC_TESTNET]
    assert quote.to_dict()["minOut"] == "4.95"


def test_get_quote_zero_output_raises(monkeypatch):
    monkeypatch.setenv("DEX_ROUTER_ADDRESS", ROUTER)
    from app.config import get_settings

    get_settings.cache_clear()
    with (
        patch("chain.rpc.eth_call", return_value=encode_abi(["uint256[]"], [[1, 0]])),
        patch("chain.rpc.erc20_decimals", return_value=6),
    ):
        with pytest.raises(SwapRouteError):
            get_quote("testnet", token_in=NATIVE_TOKEN, token_out=USDC_TESTNET, amount="10")
