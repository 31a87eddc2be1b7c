from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.schemas.beta import BetaApplicationRead, BetaApplicationRequest
from db.deps import get_db
from db.repos.beta_repo import create_beta_application

router = APIRouter(prefix="/beta-applications", tags=["beta"])


@router.post("", response_model=BetaApplicationRead, status_code=201)
def submit_beta_application(req: BetaApplicationRequest, db: Session = Depends(get_db)) -> BetaApplicationRead:
    row = create_beta_application(
        db,
        x_username=req.x_username.strip().lstrip("@"),
        email=req.email.strip().lower(),
        top_protocol=req.top_protocol.strip(),
        followed_seifu=req.followed_seifu,
        followed_miles=req.followed_miles,
    )
    return BetaApplicationRead.model_validate(row)
