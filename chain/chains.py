from __future__ import annotations

from dataclasses import dataclass

from app.config import get_settings


class UnsupportedNetworkError(ValueError):
    pass


@dataclass(frozen=True)
class SeiNetwork:
    name: str
    chain_id: int
    rpc_url: str


_CHAIN_IDS = {
    "mainnet": 1329,
    "testnet": 1328,
}


def normalize_network(network: str | None) -> str:
    value = (network or get_settings().sei_network or "mainnet").strip().lower()
    if value not in _CHAIN_IDS:
        supported = ", ".join(list_supported_networks())
        raise UnsupportedNetworkError(f"Unsupported network: {network} (supported: {supported})")
    return value


def get_network(network: str | None = None) -> SeiNetwork:
    """
    Resolve a Sei EVM network by name ("mainnet" / "testnet").
    Falls back to SEI_NETWORK from settings when no name is given.
    """
    settings = get_settings()
    name = normalize_network(network)
    rpc_url = settings.rpc_url_testnet if name == "testnet" else settings.rpc_url_mainnet
    if not rpc_url:
        raise UnsupportedNetworkError(f"No RPC URL configured for {name}")
    return SeiNetwork(
        name=name,
        chain_id=_CHAIN_IDS[name],
        rpc_url=rpc_url.rstrip("/"),
    )


def list_supported_networks() -> list[str]:
    return sorted(_CHAIN_IDS.keys())
