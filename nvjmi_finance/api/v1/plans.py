"""BNPL plan endpoints - list, detail, create, update, installment payments"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from nvjmi_finance.api.dependencies import get_request_id, get_today
from nvjmi_finance.api.v1.presenters import plan_response, portfolio_schema
from nvjmi_finance.api.v1.schemas import PaymentRequest, PlanListResponse, PlanRequest, PlanResponse
from nvjmi_finance.config import settings
from nvjmi_finance.domain.exceptions import (
    InstallmentNotFoundError,
    InvalidScheduleError,
    PlanNotFoundError,
    ScheduleSaveError,
)
from nvjmi_finance.domain.installments import (
    generate_schedule,
    open_draft,
    prepare_plan_fields,
    redistribute_schedule,
    schedule_mismatch,
    set_paid,
)
from nvjmi_finance.domain.models import Installment, PlanStatus
from nvjmi_finance.domain.portfolio import summarize_portfolio
from nvjmi_finance.infrastructure.database.models import BNPLPlan
from nvjmi_finance.infrastructure.database.repositories import PlanRepository, to_domain_plan
from nvjmi_finance.infrastructure.database.session import get_db
from nvjmi_finance.infrastructure.observability.logging import log_plan_saved
from nvjmi_finance.infrastructure.observability.metrics import record_plan_save, schedule_regeneration_counter
from nvjmi_finance.utils.money import format_money

router = APIRouter()


def _parse_plan_id(plan_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(plan_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid plan ID format")


def _load_plan(repo: PlanRepository, plan_id: str, user_id: str) -> BNPLPlan:
    db_plan = repo.get_plan_by_id(_parse_plan_id(plan_id), user_id=user_id)
    if not db_plan:
        raise PlanNotFoundError(f"Plan {plan_id} not found")
    return db_plan


def _build_schedule(body: PlanRequest, previous: List[Installment]) -> List[Installment]:
    """Explicit installments win; otherwise split the total, keeping paid state by position"""
    if body.installments:
        return [
            Installment(
                sequence=inst.sequence,
                amount_cents=inst.amount_cents,
                is_paid=inst.is_paid,
                due_date=inst.due_date,
                paid_at=inst.paid_at if inst.is_paid else None,
            )
            for inst in body.installments
        ]

    if body.installment_count:
        schedule_regeneration_counter.inc()
        if body.first_due_date is not None:
            return generate_schedule(
                body.total_amount_cents,
                body.installment_count,
                previous=previous,
                first_due_date=body.first_due_date,
            )
        return redistribute_schedule(previous, body.total_amount_cents, body.installment_count, dirty=False)

    raise InvalidScheduleError("Provide installments or an installment count")


def _schedule_warnings(installments: List[Installment], total_cents: int) -> List[str]:
    """Non-blocking warning when hand-edited amounts drift from the stated total"""
    drift = schedule_mismatch(installments, total_cents, settings.schedule_mismatch_tolerance_cents)
    if drift is None:
        return []
    scheduled = total_cents + drift
    direction = "over" if drift > 0 else "under"
    return [
        f"Installments add up to {format_money(scheduled, settings.currency_symbol)}, "
        f"{format_money(abs(drift), settings.currency_symbol)} {direction} "
        f"the total of {format_money(total_cents, settings.currency_symbol)}"
    ]


@router.get("/plans", response_model=PlanListResponse)
def list_plans(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    List a user's plans with metrics, due state and a portfolio summary.

    Plans are ordered soonest due first; undated plans come last. The summary
    covers every plan, only the returned rows are capped.
    """
    repo = PlanRepository(db)
    plans = [to_domain_plan(p) for p in repo.get_plans_by_user(user_id)]

    return PlanListResponse(
        user_id=user_id,
        summary=portfolio_schema(summarize_portfolio(plans, today)),
        plans=[plan_response(plan, today) for plan in plans[: settings.plan_list_limit]],
    )


@router.get("/plans/{plan_id}", response_model=PlanResponse)
def get_plan(
    plan_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Retrieve a plan with its installment schedule"""
    try:
        db_plan = _load_plan(PlanRepository(db), plan_id, user_id)
    except PlanNotFoundError:
        raise HTTPException(status_code=404, detail="Plan not found")

    return plan_response(to_domain_plan(db_plan), today)


@router.post("/plans", response_model=PlanResponse, status_code=201)
def create_plan(
    body: PlanRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Create a BNPL plan.

    Flow:
    1. Build the schedule (explicit installments or an even split)
    2. Derive scalar fields and status from the schedule
    3. Persist plan + installments in one transaction
    4. Return the plan with any schedule drift warning
    """
    request_id = get_request_id(request)

    try:
        installments = _build_schedule(body, previous=[])
        fields = prepare_plan_fields(installments, body.status, body.next_due_date)
        warnings = _schedule_warnings(installments, body.total_amount_cents)

        repo = PlanRepository(db)
        db_plan = repo.create_plan(
            user_id=body.user_id,
            merchant=body.merchant,
            fields=fields,
            installments=installments,
            item_name=body.item_name,
            account_id=body.account_id,
            notes=body.notes,
        )
        db.commit()

    except InvalidScheduleError as e:
        db.rollback()
        logging.warning(f"Invalid schedule: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ScheduleSaveError as e:
        db.rollback()
        record_plan_save("create", success=False)
        logging.error(f"Plan save failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not save plan")

    plan = to_domain_plan(db_plan)
    record_plan_save("create", success=True, mismatch=bool(warnings))
    log_plan_saved(request_id, body.user_id, plan.id, "create", len(installments), plan.status.value, warnings)

    return plan_response(plan, today, warnings)


@router.put("/plans/{plan_id}", response_model=PlanResponse)
def update_plan(
    plan_id: str,
    body: PlanRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Update a plan and replace its schedule.

    An even split regenerated from a count keeps paid flags and due dates of
    installments at the same positions. The old batch is swapped for the new
    one atomically.
    """
    request_id = get_request_id(request)
    repo = PlanRepository(db)

    try:
        db_plan = _load_plan(repo, plan_id, body.user_id)
        previous = to_domain_plan(db_plan).installments

        installments = _build_schedule(body, previous=previous)
        fields = prepare_plan_fields(installments, body.status, body.next_due_date)
        warnings = _schedule_warnings(installments, body.total_amount_cents)

        repo.update_plan(
            db_plan,
            merchant=body.merchant,
            fields=fields,
            installments=installments,
            item_name=body.item_name,
            account_id=body.account_id,
            notes=body.notes,
        )
        db.commit()

    except PlanNotFoundError as e:
        db.rollback()
        logging.warning(f"Plan lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Plan not found")

    except InvalidScheduleError as e:
        db.rollback()
        logging.warning(f"Invalid schedule: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ScheduleSaveError as e:
        db.rollback()
        record_plan_save("update", success=False)
        logging.error(f"Plan save failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not save plan")

    plan = to_domain_plan(db_plan)
    record_plan_save("update", success=True, mismatch=bool(warnings))
    log_plan_saved(request_id, body.user_id, plan.id, "update", len(installments), plan.status.value, warnings)

    return plan_response(plan, today, warnings)


@router.post("/plans/{plan_id}/installments/{sequence}/payment", response_model=PlanResponse)
def record_payment(
    plan_id: str,
    sequence: int,
    body: PaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Mark one installment paid (or unpaid) and recompute the plan.

    Paying the last open installment completes the plan; un-paying an
    installment on a completed plan reopens it as active.
    """
    request_id = get_request_id(request)
    repo = PlanRepository(db)

    try:
        db_plan = _load_plan(repo, plan_id, body.user_id)
        plan = to_domain_plan(db_plan)

        draft = open_draft(plan.legacy.total_amount_cents or 0, len(plan.installments), plan.installments)
        draft = set_paid(draft, sequence, body.paid, body.paid_at or datetime.now(timezone.utc))
        updated = next(inst for inst in draft.installments if inst.sequence == sequence)

        stored_status = PlanStatus(db_plan.status)
        requested = PlanStatus.ACTIVE if stored_status == PlanStatus.COMPLETED else stored_status
        fields = prepare_plan_fields(draft.installments, requested)
        if fields.next_due_date is None and fields.status != PlanStatus.COMPLETED:
            fields.next_due_date = db_plan.next_due_date

        db_installment = next(inst for inst in db_plan.installments if inst.sequence == sequence)
        db_installment.is_paid = updated.is_paid
        db_installment.paid_at = updated.paid_at
        repo.apply_fields(db_plan, fields)
        db.commit()

    except PlanNotFoundError as e:
        db.rollback()
        logging.warning(f"Plan lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Plan not found")

    except InstallmentNotFoundError as e:
        db.rollback()
        logging.warning(f"Installment lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=f"Installment {sequence} not found")

    except InvalidScheduleError as e:
        db.rollback()
        logging.warning(f"Invalid payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ScheduleSaveError as e:
        db.rollback()
        record_plan_save("payment", success=False)
        logging.error(f"Payment save failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Could not save payment")

    plan = to_domain_plan(db_plan)
    record_plan_save("payment", success=True)
    log_plan_saved(request_id, body.user_id, plan.id, "payment", len(plan.installments), plan.status.value, [])

    return plan_response(plan, today)
