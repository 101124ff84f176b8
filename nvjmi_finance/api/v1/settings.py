"""GET/PUT /v1/settings/budget - payday configuration"""

import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nvjmi_finance.api.dependencies import get_request_id, get_today
from nvjmi_finance.api.v1.schemas import BudgetSettingsRequest, BudgetSettingsResponse
from nvjmi_finance.config import settings
from nvjmi_finance.domain.affordability import resolve_next_payday
from nvjmi_finance.infrastructure.database.repositories import SettingsRepository
from nvjmi_finance.infrastructure.database.session import get_db

router = APIRouter()


def _response(user_id: str, payday, override, monthly_budget_cents, today: date) -> BudgetSettingsResponse:
    return BudgetSettingsResponse(
        user_id=user_id,
        payday=payday,
        next_payday_override=override,
        monthly_budget_cents=monthly_budget_cents,
        next_payday=resolve_next_payday(today, payday_day=payday or settings.default_payday, override=override),
    )


@router.get("/settings/budget", response_model=BudgetSettingsResponse)
def get_budget_settings(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Return the user's payday settings and the payday they resolve to today"""
    row = SettingsRepository(db).get_settings(user_id)
    if row is None:
        return _response(user_id, None, None, None, today)
    return _response(user_id, row.payday, row.next_payday_override, row.monthly_budget_cents, today)


@router.put("/settings/budget", response_model=BudgetSettingsResponse)
def put_budget_settings(
    body: BudgetSettingsRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Save payday day-of-month and an optional one-off override date"""
    try:
        row = SettingsRepository(db).upsert_settings(
            body.user_id, body.payday, body.next_payday_override, body.monthly_budget_cents
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Settings save failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Could not save settings")

    return _response(row.user_id, row.payday, row.next_payday_override, row.monthly_budget_cents, today)
