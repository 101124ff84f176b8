"""GET /v1/dashboard/available-to-spend - finance dashboard affordability figure"""

import time
from datetime import date
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from nvjmi_finance.api.dependencies import get_affordability_policy, get_request_id, get_today
from nvjmi_finance.api.v1.schemas import AvailableToSpendResponse
from nvjmi_finance.config import settings
from nvjmi_finance.domain.affordability import AffordabilityPolicy, compute_available_to_spend, resolve_next_payday
from nvjmi_finance.infrastructure.database.repositories import (
    AccountRepository,
    PlanRepository,
    SettingsRepository,
    StatementRepository,
    to_domain_plan,
)
from nvjmi_finance.infrastructure.database.session import get_db
from nvjmi_finance.infrastructure.observability.logging import log_available_to_spend
from nvjmi_finance.infrastructure.observability.metrics import record_available_to_spend
from nvjmi_finance.utils.money import format_money

router = APIRouter()


@router.get("/dashboard/available-to-spend", response_model=AvailableToSpendResponse)
def get_available_to_spend(
    request: Request,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    policy: AffordabilityPolicy = Depends(get_affordability_policy),
):
    """
    Project how much the user can spend before the next payday.

    Flow:
    1. Resolve next payday (override > configured day > month end)
    2. Load liquid accounts, plans due in the window and pending card statements
    3. Subtract installments and minimum payments due in [today, payday]
    """
    start_time = time.time()
    request_id = get_request_id(request)

    budget = SettingsRepository(db).get_settings(user_id)
    next_payday = resolve_next_payday(
        today,
        payday_day=budget.payday if budget and budget.payday else settings.default_payday,
        override=budget.next_payday_override if budget else None,
    )

    plans = [to_domain_plan(p) for p in PlanRepository(db).get_open_plans_due_between(user_id, today, next_payday)]
    result = compute_available_to_spend(
        accounts=AccountRepository(db).get_active_accounts(user_id),
        plans=plans,
        statements=StatementRepository(db).get_pending_statements(user_id),
        today=today,
        next_payday=next_payday,
        policy=policy,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_available_to_spend(result.tier.value)
    log_available_to_spend(
        request_id, user_id, result.tier.value, result.available_cents, result.due_before_payday_cents, duration_ms
    )

    return AvailableToSpendResponse(
        user_id=user_id,
        liquid_cents=result.liquid_cents,
        due_before_payday_cents=result.due_before_payday_cents,
        available_cents=result.available_cents,
        tier=result.tier,
        next_payday=result.next_payday,
        display=format_money(result.available_cents, settings.currency_symbol),
    )
