from __future__ import annotations

from sqlalchemy.orm import Session

from db.models.beta_application import BetaApplication


def create_beta_application(
    db: Session,
    *,
    x_username: str,
    email: str,
    top_protocol: str,
    followed_seifu: bool,
    followed_miles: bool,
) -> BetaApplication:
    row = BetaApplication(
        x_username=x_username,
        email=email,
        top_protocol=top_protocol,
        followed_seifu=followed_seifu,
        followed_miles=followed_miles,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
