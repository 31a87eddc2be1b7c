from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.schemas.swap import FixedSwapQuote, FixedSwapRequest
from defi.fixed_rate import FixedRateUnavailableError, fixed_quote

router = APIRouter(prefix="/swap", tags=["swap"])


@router.post("/fixed", response_model=FixedSwapQuote, response_model_exclude_none=True)
def swap_fixed(req: FixedSwapRequest) -> FixedSwapQuote:
    try:
        out = fixed_quote(sei_amount=req.seiAmount, usdc_amount=req.usdcAmount)
    except FixedRateUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return FixedSwapQuote(**out)
