"""Plan metrics aggregation over itemized schedules and legacy flat terms"""

from typing import List

from nvjmi_finance.domain.models import (
    Installment,
    InstallmentPlan,
    LegacyTerms,
    PlanMetrics,
    PlanStatus,
    ScheduleView,
)


def _count(value) -> int:
    """Legacy numeric columns may be null; treat them as zero"""
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def itemized_view(installments: List[Installment]) -> ScheduleView:
    """Normalize an itemized schedule, walking it in sequence order"""
    ordered = sorted(installments, key=lambda inst: inst.sequence)
    unpaid = [inst for inst in ordered if not inst.is_paid]

    return ScheduleView(
        total_cents=sum(inst.amount_cents for inst in ordered),
        total_installments=len(ordered),
        paid_installments=len(ordered) - len(unpaid),
        remaining_balance_cents=sum(inst.amount_cents for inst in unpaid),
        next_installment_cents=unpaid[0].amount_cents if unpaid else None,
    )


def legacy_view(terms: LegacyTerms) -> ScheduleView:
    """Normalize flat plan fields; balance is estimated as total minus paid installments"""
    total = _count(terms.total_amount_cents)
    installment_amount = _count(terms.installment_amount_cents)
    paid = _count(terms.installments_paid)

    return ScheduleView(
        total_cents=total,
        total_installments=_count(terms.installments_total),
        paid_installments=paid,
        remaining_balance_cents=max(total - installment_amount * paid, 0),
        next_installment_cents=installment_amount,
    )


def schedule_view(plan: InstallmentPlan) -> ScheduleView:
    """Pick the plan's source of truth: the schedule when present, else the flat terms"""
    if plan.installments:
        return itemized_view(plan.installments)
    return legacy_view(plan.legacy)


def metrics_from_view(view: ScheduleView) -> PlanMetrics:
    """Build PlanMetrics from a normalized schedule"""
    total = view.total_installments
    paid = view.paid_installments
    # Integer half-up rounding of 100 * paid / total (12.5% -> 13)
    progress = (200 * paid + total) // (2 * total) if total > 0 else 0

    return PlanMetrics(
        total_cents=view.total_cents,
        total_installments=total,
        paid_installments=paid,
        remaining_installments=max(total - paid, 0),
        remaining_balance_cents=view.remaining_balance_cents,
        next_installment_cents=view.next_installment_cents,
        progress_percent=min(max(progress, 0), 100),
    )


def compute_metrics(plan: InstallmentPlan) -> PlanMetrics:
    """
    Compute payment progress for a plan.

    Itemized and legacy plans produce the same PlanMetrics shape, so callers
    never branch on how the plan is stored.

    Example:
        [334 paid, 333, 333] -> paid=1, remaining=2, balance=666, progress=33
    """
    return metrics_from_view(schedule_view(plan))


def derive_status(stored_status: PlanStatus, metrics: PlanMetrics) -> PlanStatus:
    """A plan with every installment paid is completed, whatever status was stored"""
    if metrics.total_installments > 0 and metrics.paid_installments == metrics.total_installments:
        return PlanStatus.COMPLETED
    return PlanStatus(stored_status)


def effective_status(plan: InstallmentPlan) -> PlanStatus:
    """Status the plan should be read with; a fully paid plan is completed even if stored as active"""
    return derive_status(plan.status, compute_metrics(plan))
