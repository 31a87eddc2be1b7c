from __future__ import annotations

import logging
import time
from decimal import Decimal
from functools import lru_cache
from typing import Any

from web3 import Web3

from app.config import get_settings
from chain import rpc
from chain.abis import ERC20_ABI, TOKEN_FACTORY_ABI
from chain.chains import get_network
from chain.pricing import fetch_sei_usd_price
from defi import router_v2
from tools.tool_runner import run_tool

logger = logging.getLogger(__name__)

MAX_UINT256 = (1 << 256) - 1


class WalletNotConfiguredError(RuntimeError):
    pass


class SeiWallet:
    """
    Server-side agent wallet signing with a single private key.

    Every chain call goes through run_tool so it shows up in the logs.
    """

    def __init__(self, private_key: str, network: str = "mainnet") -> None:
        if not private_key:
            raise WalletNotConfiguredError("SEI_PRIVATE_KEY is not configured")
        self.network = get_network(network).name
        self._account = Web3().eth.account.from_key(private_key)

    @classmethod
    def from_settings(cls) -> "SeiWallet":
        s = get_settings()
        return cls(s.sei_private_key, s.sei_network)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def usdc_address(self) -> str:
        return Web3.to_checksum_address(get_settings().usdc_address(self.network))

    # ---------------------------
    # Balances
    # ---------------------------

    def get_sei_balance(self) -> dict[str, Any]:
        wei = run_tool(
            tool_name="web3.eth_getBalance",
            request={"network": self.network, "address": self.address},
            fn=lambda: int(rpc.get_native_balance(self.network, self.address)),
        )
        sei = router_v2.from_base_units(wei, router_v2.NATIVE_DECIMALS)
        price = fetch_sei_usd_price()
        return {
            "sei": f"{sei:.4f}",
            "wei": wei,
            "usd": float(sei) * price,
        }

    def get_usdc_balance(self) -> dict[str, Any]:
        token = self.usdc_address
        raw = run_tool(
            tool_name="web3.erc20.balanceOf",
            request={"network": self.network, "token": token, "owner": self.address},
            fn=lambda: int(rpc.erc20_balance(self.network, token, self.address)),
        )
        decimals = rpc.erc20_decimals(self.network, token)
        return {
            "balance": str(router_v2.from_base_units(raw, decimals)),
            "raw": raw,
            "decimals": decimals,
            "token": token,
        }

    # ---------------------------
    # Transactions
    # ---------------------------

    def _send(self, tx: dict[str, Any], *, tool_name: str) -> str:
        """
        Fill nonce, gas and fees, sign with the agent key and broadcast. Returns the tx hash.
        """
        net = get_network(self.network)
        w3 = rpc.get_web3(self.network)

        def _submit() -> str:
            full = dict(tx)
            full.setdefault("value", 0)
            full["from"] = self.address
            full["chainId"] = net.chain_id
            full["nonce"] = w3.eth.get_transaction_count(self.address)
            full["gas"] = rpc.estimate_gas(self.network, full)
            full.update(rpc.get_fee_quote(self.network))

            signed = self._account.sign_transaction(full)
            tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
            return Web3.to_hex(tx_hash)

        return run_tool(
            tool_name=tool_name,
            request={"network": self.network, "to": tx.get("to"), "value": str(tx.get("value", 0))},
            fn=_submit,
        )

    def transfer_token(self, amount: str | float, recipient: str, token: str | None = None) -> str:
        """
        Send native SEI (token=None) or an ERC20 amount given in whole units.
        """
        to = Web3.to_checksum_address(recipient)

        if token is None or router_v2.is_native(token):
            value = router_v2.to_base_units(str(amount), router_v2.NATIVE_DECIMALS)
            return self._send({"to": to, "value": value}, tool_name="wallet.transfer_native")

        token_cs = Web3.to_checksum_address(token)
        decimals = rpc.erc20_decimals(self.network, token_cs)
        value = router_v2.to_base_units(str(amount), decimals)
        contract = Web3().eth.contract(address=token_cs, abi=ERC20_ABI)
        data = contract.encode_abi("transfer", args=[to, value])
        return self._send({"to": token_cs, "data": data}, tool_name="wallet.transfer_erc20")

    def _ensure_allowance(self, token: str, spender: str, amount: int) -> None:
        current = rpc.erc20_allowance(self.network, token, self.address, spender)
        if current >= amount:
            return
        contract = Web3().eth.contract(address=token, abi=ERC20_ABI)
        data = contract.encode_abi("approve", args=[spender, MAX_UINT256])
        tx_hash = self._send({"to": token, "data": data}, tool_name="wallet.approve")
        rpc.get_web3(self.network).eth.wait_for_transaction_receipt(tx_hash)

    def swap_tokens(
        self,
        *,
        token_in: str,
        token_out: str,
        amount: str,
        min_out: str,
    ) -> str:
        """
        Swap through the configured V2 router. Raises ValueError on insufficient balance.
        """
        router = router_v2.router_address()
        path = router_v2.build_path(self.network, token_in, token_out)
        amount_in = router_v2.to_base_units(amount, router_v2.token_decimals(self.network, token_in))
        min_out_units = int(
            Decimal(str(min_out)) * (Decimal(10) ** router_v2.token_decimals(self.network, token_out))
        )

        if router_v2.is_native(token_in):
            balance = rpc.get_native_balance(self.network, self.address)
        else:
            token_cs = Web3.to_checksum_address(token_in)
            balance = rpc.erc20_balance(self.network, token_cs, self.address)
        if balance < amount_in:
            raise ValueError(f"insufficient balance for swap: have {balance}, need {amount_in}")

        if not router_v2.is_native(token_in):
            self._ensure_allowance(Web3.to_checksum_address(token_in), router, amount_in)

        deadline = int(time.time()) + get_settings().swap_deadline_seconds
        data, value = router_v2.encode_swap(
            router=router,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            min_out=min_out_units,
            path=path,
            recipient=self.address,
            deadline=deadline,
        )
        return self._send({"to": router, "data": data, "value": value}, tool_name="wallet.swap")

    def create_token(self, name: str, symbol: str, total_supply: int) -> dict[str, Any]:
        """
        Deploy a token via the factory. The call is simulated first so a revert never costs gas.
        """
        factory_address = get_settings().token_factory_address
        if not factory_address:
            raise WalletNotConfiguredError("TOKEN_FACTORY_ADDRESS is not configured")

        w3 = rpc.get_web3(self.network)
        factory = w3.eth.contract(
            address=Web3.to_checksum_address(factory_address), abi=TOKEN_FACTORY_ABI
        )
        fee = int(factory.functions.creationFee().call())
        supply = int(total_supply) * 10**18
        data = factory.encode_abi("createToken", args=[name, symbol, supply])
        tx = {"to": factory.address, "data": data, "value": fee}

        raw = run_tool(
            tool_name="web3.eth_call",
            request={"network": self.network, "factory": factory.address, "name": name},
            fn=lambda: rpc.eth_call(self.network, {**tx, "from": self.address}),
        )
        predicted = None
        if raw and len(raw) >= 32:
            predicted = Web3.to_checksum_address(bytes(raw)[-20:])

        tx_hash = self._send(tx, tool_name="wallet.create_token")
        logger.info("token created name=%s symbol=%s tx=%s", name, symbol, tx_hash)
        return {"txHash": tx_hash, "tokenAddress": predicted, "creationFeeWei": str(fee)}


@lru_cache
def get_wallet() -> SeiWallet:
    return SeiWallet.from_settings()
