"""Map domain view-models onto API response schemas"""

from dataclasses import asdict
from datetime import date
from typing import List, Optional

from nvjmi_finance.api.v1.schemas import (
    DueStateSchema,
    InstallmentSchema,
    PlanMetricsSchema,
    PlanResponse,
    PortfolioSchema,
)
from nvjmi_finance.domain.due_state import classify_due_state
from nvjmi_finance.domain.metrics import compute_metrics, derive_status
from nvjmi_finance.domain.models import DueState, Installment, InstallmentPlan, PortfolioSummary


def installment_schemas(installments: List[Installment]) -> List[InstallmentSchema]:
    return [
        InstallmentSchema(**asdict(inst))
        for inst in sorted(installments, key=lambda inst: inst.sequence)
    ]


def due_state_schema(state: Optional[DueState]) -> Optional[DueStateSchema]:
    return DueStateSchema(**asdict(state)) if state else None


def plan_response(plan: InstallmentPlan, today: date, warnings: Optional[List[str]] = None) -> PlanResponse:
    """Plan detail with freshly computed metrics and due state"""
    metrics = compute_metrics(plan)
    return PlanResponse(
        plan_id=plan.id,
        user_id=plan.user_id,
        account_id=plan.account_id,
        merchant=plan.merchant,
        item_name=plan.item_name,
        status=derive_status(plan.status, metrics),
        next_due_date=plan.next_due_date,
        notes=plan.notes,
        installments=installment_schemas(plan.installments),
        metrics=PlanMetricsSchema(**asdict(metrics)),
        due_state=due_state_schema(classify_due_state(plan, today)),
        warnings=warnings or [],
    )


def portfolio_schema(summary: PortfolioSummary) -> PortfolioSchema:
    return PortfolioSchema(
        active_count=summary.active_count,
        overdue_count=summary.overdue_count,
        completed_count=summary.completed_count,
        outstanding_cents=summary.outstanding_cents,
        monthly_commitments_cents=summary.monthly_commitments_cents,
        next_plan_id=summary.next_plan.id if summary.next_plan else None,
        next_due_state=due_state_schema(summary.next_due_state),
    )
