"""Portfolio summary across a user's BNPL plans"""

from datetime import date
from typing import List

from nvjmi_finance.domain.due_state import classify_due_state
from nvjmi_finance.domain.metrics import compute_metrics, effective_status
from nvjmi_finance.domain.models import InstallmentPlan, PlanStatus, PortfolioSummary


def summarize_portfolio(plans: List[InstallmentPlan], today: date) -> PortfolioSummary:
    """
    Aggregate plan counts and commitments for the plan list header.

    Plans are grouped by effective status, so a fully paid plan still stored
    as active counts as completed. Outstanding balance and monthly
    commitments only count active plans. The highlighted plan is the
    overdue-or-active plan with the earliest due date.
    """
    by_status = {status: [] for status in PlanStatus}
    for plan in plans:
        by_status[effective_status(plan)].append(plan)

    active = by_status[PlanStatus.ACTIVE]
    overdue = by_status[PlanStatus.OVERDUE]
    active_metrics = [compute_metrics(plan) for plan in active]

    upcoming = sorted(
        (plan for plan in overdue + active if plan.next_due_date is not None),
        key=lambda plan: plan.next_due_date,
    )
    next_plan = upcoming[0] if upcoming else None

    return PortfolioSummary(
        active_count=len(active),
        overdue_count=len(overdue),
        completed_count=len(by_status[PlanStatus.COMPLETED]),
        outstanding_cents=sum(m.remaining_balance_cents for m in active_metrics),
        monthly_commitments_cents=sum(m.next_installment_cents or 0 for m in active_metrics),
        next_plan=next_plan,
        next_due_state=classify_due_state(next_plan, today) if next_plan else None,
    )
