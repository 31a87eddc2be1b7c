from __future__ import annotations

from functools import lru_cache
from typing import Any

from web3 import Web3
from web3.exceptions import ContractLogicError

from chain.abis import ERC20_ABI, TRANSFER_TOPIC
from chain.chains import get_network


class Web3RPCError(RuntimeError):
    pass


@lru_cache
def _get_web3(network: str) -> Web3:
    """
    Lazily create and cache a Web3 instance per Sei network.
    """
    net = get_network(network)
    w3 = Web3(Web3.HTTPProvider(net.rpc_url))

    if not w3.is_connected():
        raise Web3RPCError(f"Unable to connect to RPC for network={net.name}")

    return w3


def get_web3(network: str) -> Web3:
    return _get_web3(get_network(network).name)


# ---------------------------
# Native chain helpers
# ---------------------------

def get_native_balance(network: str, address: str) -> int:
    """
    Return native SEI balance in wei.
    """
    w3 = get_web3(network)
    try:
        return w3.eth.get_balance(Web3.to_checksum_address(address))
    except Exception as e:
        raise Web3RPCError(f"get_native_balance failed: {e}") from e


def get_code(network: str, address: str) -> bytes:
    w3 = get_web3(network)
    try:
        return bytes(w3.eth.get_code(Web3.to_checksum_address(address)))
    except Exception as e:
        raise Web3RPCError(f"get_code failed: {e}") from e


def get_block_number(network: str) -> int:
    w3 = get_web3(network)
    try:
        return int(w3.eth.block_number)
    except Exception as e:
        raise Web3RPCError(f"get_block_number failed: {e}") from e


def get_block_transactions(network: str, block_number: int) -> list[dict[str, Any]]:
    """
    Return the block's full transactions as plain dicts.
    """
    w3 = get_web3(network)
    try:
        block = w3.eth.get_block(block_number, full_transactions=True)
    except Exception as e:
        raise Web3RPCError(f"get_block failed: {e}") from e
    return [dict(tx) for tx in block.get("transactions", [])]


# ---------------------------
# ERC20 helpers
# ---------------------------

def _erc20_contract(network: str, token_address: str):
    w3 = get_web3(network)
    return w3.eth.contract(
        address=Web3.to_checksum_address(token_address),
        abi=ERC20_ABI,
    )


def _erc20_call(network: str, token_address: str, fn_name: str, *args):
    try:
        contract = _erc20_contract(network, token_address)
        return getattr(contract.functions, fn_name)(*args).call()
    except ContractLogicError as e:
        raise Web3RPCError(f"erc20_{fn_name} reverted: {e}") from e
    except Exception as e:
        raise Web3RPCError(f"erc20_{fn_name} failed: {e}") from e


def erc20_balance(network: str, token_address: str, owner: str) -> int:
    """
    Return ERC20 balance (raw uint256).
    """
    return int(_erc20_call(network, token_address, "balanceOf", Web3.to_checksum_address(owner)))


def erc20_allowance(network: str, token_address: str, owner: str, spender: str) -> int:
    return int(
        _erc20_call(
            network,
            token_address,
            "allowance",
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        )
    )


@lru_cache(maxsize=256)
def erc20_decimals(network: str, token_address: str) -> int:
    return int(_erc20_call(network, token_address, "decimals"))


def erc20_symbol(network: str, token_address: str) -> str:
    return str(_erc20_call(network, token_address, "symbol"))


def erc20_name(network: str, token_address: str) -> str:
    return str(_erc20_call(network, token_address, "name"))


def erc20_total_supply(network: str, token_address: str) -> int:
    return int(_erc20_call(network, token_address, "totalSupply"))


def get_transfer_logs(
    network: str,
    *,
    address: str,
    from_block: int,
    to_block: int,
) -> list[dict[str, Any]]:
    """
    ERC20 Transfer logs where `address` is the sender or the recipient.

    Self-transfers match both queries and are returned once.
    """
    w3 = get_web3(network)
    padded = "0x" + Web3.to_checksum_address(address)[2:].lower().rjust(64, "0")
    logs: dict[tuple[Any, Any], dict[str, Any]] = {}
    try:
        for topics in ([TRANSFER_TOPIC, padded], [TRANSFER_TOPIC, None, padded]):
            for entry in w3.eth.get_logs(
                {"fromBlock": from_block, "toBlock": to_block, "topics": topics}
            ):
                logs.setdefault((entry["transactionHash"], entry["logIndex"]), dict(entry))
    except Exception as e:
        raise Web3RPCError(f"get_transfer_logs failed: {e}") from e
    return list(logs.values())


# ---------------------------
# Simulation / submission helpers
# ---------------------------

def eth_call(network: str, tx: dict[str, Any]) -> bytes:
    """
    Perform eth_call (no state change).
    """
    w3 = get_web3(network)
    try:
        return w3.eth.call(tx)
    except ContractLogicError as e:
        raise Web3RPCError(f"eth_call reverted: {e}") from e
    except Exception as e:
        raise Web3RPCError(f"eth_call failed: {e}") from e


def estimate_gas(network: str, tx: dict[str, Any]) -> int:
    w3 = get_web3(network)
    try:
        return w3.eth.estimate_gas(tx)
    except ContractLogicError as e:
        raise Web3RPCError(f"estimate_gas reverted: {e}") from e
    except Exception as e:
        raise Web3RPCError(f"estimate_gas failed: {e}") from e


def get_fee_quote(network: str) -> dict[str, int]:
    """
    Return either legacy gasPrice or EIP-1559 fee fields.
    """
    w3 = get_web3(network)
    try:
        block = w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is not None:
            try:
                max_priority = w3.eth.max_priority_fee
            except Exception:
                max_priority = None

            if max_priority is None:
                max_priority = max(w3.eth.gas_price - base_fee, 0)

            return {
                "maxFeePerGas": int(base_fee + (max_priority * 2)),
                "maxPriorityFeePerGas": int(max_priority),
            }

        return {"gasPrice": int(w3.eth.gas_price)}
    except Exception as e:
        raise Web3RPCError(f"get_fee_quote failed: {e}") from e
