from __future__ import annotations

from typing import Any

from web3 import Web3


def _view(name: str, inputs: list[dict[str, str]], output_type: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [{"name": "", "type": output_type}],
    }


ERC20_ABI: list[dict[str, Any]] = [
    _view("name", [], "string"),
    _view("symbol", [], "string"),
    _view("decimals", [], "uint8"),
    _view("totalSupply", [], "uint256"),
    _view("balanceOf", [{"name": "account", "type": "address"}], "uint256"),
    _view(
        "allowance",
        [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "uint256",
    ),
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

# keccak("Transfer(address,address,uint256)")
TRANSFER_TOPIC = Web3.to_hex(Web3.keccak(text="Transfer(address,address,uint256)"))

# Seifun token factory: fixed-supply ERC20 deployer with a native-token creation fee.
TOKEN_FACTORY_ABI: list[dict[str, Any]] = [
    _view("creationFee", [], "uint256"),
    {
        "name": "createToken",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "symbol", "type": "string"},
            {"name": "totalSupply", "type": "uint256"},
        ],
        "outputs": [{"name": "token", "type": "address"}],
    },
]
