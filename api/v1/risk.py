from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.schemas.risk import RiskRequest, RiskSummary
from app.config import get_settings
from chain.chains import UnsupportedNetworkError
from chain.rpc import Web3RPCError
from token_risk import TokenScanner

router = APIRouter(prefix="/risk", tags=["risk"])


@router.post("", response_model=RiskSummary)
def token_risk(req: RiskRequest) -> RiskSummary:
    if not req.tokenAddress or not req.tokenAddress.strip():
        raise HTTPException(status_code=400, detail="Missing tokenAddress")

    network = req.network or get_settings().sei_network
    try:
        report = TokenScanner().analyze(req.tokenAddress.strip(), network=network)
    except Web3RPCError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except (UnsupportedNetworkError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return RiskSummary(**report.to_summary())
