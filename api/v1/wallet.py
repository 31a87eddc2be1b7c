from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.schemas.wallet import (
    InteractionsRequest,
    InteractionsResponse,
    PortfolioRequest,
    PortfolioResponse,
)
from chain.chains import UnsupportedNetworkError
from chain.interactions import fetch_interactions
from chain.rpc import Web3RPCError
from chain.snapshot import fetch_portfolio

router = APIRouter(prefix="/wallet", tags=["wallet"])


def _validate_address(address: str) -> None:
    if not address.startswith("0x"):
        raise HTTPException(status_code=422, detail="address must start with '0x'")


@router.post("/portfolio", response_model=PortfolioResponse)
def wallet_portfolio(req: PortfolioRequest) -> PortfolioResponse:
    _validate_address(req.address)
    try:
        data = fetch_portfolio(network=req.network, address=req.address, include_symbols=req.includeSymbols)
    except Web3RPCError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except (UnsupportedNetworkError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return PortfolioResponse(**data)


@router.post("/interactions", response_model=InteractionsResponse)
def wallet_interactions(req: InteractionsRequest) -> InteractionsResponse:
    _validate_address(req.address)
    try:
        data = fetch_interactions(
            network=req.network,
            address=req.address,
            limit=req.limit,
            include_native=req.includeNative,
            native_blocks=req.nativeBlocks,
            hours=req.hours,
        )
    except Web3RPCError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except (UnsupportedNetworkError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return InteractionsResponse(**data)
