"""Unit tests for plan metrics aggregation"""

from nvjmi_finance.domain.metrics import compute_metrics, derive_status, effective_status
from nvjmi_finance.domain.models import Installment, InstallmentPlan, LegacyTerms, PlanMetrics, PlanStatus


def test_itemized_metrics(itemized_plan):
    """Test [334 paid, 333, 333] schedule"""
    metrics = compute_metrics(itemized_plan)

    assert metrics == PlanMetrics(
        total_cents=1000,
        total_installments=3,
        paid_installments=1,
        remaining_installments=2,
        remaining_balance_cents=666,
        next_installment_cents=333,
        progress_percent=33,
    )


def test_legacy_metrics(legacy_plan):
    """Test flat fields produce the same shape as an itemized schedule"""
    metrics = compute_metrics(legacy_plan)

    assert metrics == PlanMetrics(
        total_cents=30000,
        total_installments=3,
        paid_installments=1,
        remaining_installments=2,
        remaining_balance_cents=20000,
        next_installment_cents=10000,
        progress_percent=33,
    )


def test_next_installment_follows_sequence_not_list_order():
    plan = InstallmentPlan(
        id="p",
        user_id="u",
        merchant="m",
        installments=[Installment(3, 300), Installment(1, 100, is_paid=True), Installment(2, 200)],
    )

    assert compute_metrics(plan).next_installment_cents == 200


def test_fully_paid_schedule():
    plan = InstallmentPlan(
        id="p",
        user_id="u",
        merchant="m",
        installments=[Installment(1, 500, is_paid=True), Installment(2, 500, is_paid=True)],
    )

    metrics = compute_metrics(plan)

    assert metrics.next_installment_cents is None
    assert metrics.remaining_balance_cents == 0
    assert metrics.progress_percent == 100


def test_progress_rounds_half_up():
    plan = InstallmentPlan(
        id="p",
        user_id="u",
        merchant="m",
        installments=[Installment(i, 100, is_paid=(i == 1)) for i in range(1, 9)],
    )

    assert compute_metrics(plan).progress_percent == 13  # 12.5%


def test_legacy_nulls_degrade_to_zero():
    plan = InstallmentPlan(
        id="p",
        user_id="u",
        merchant="m",
        legacy=LegacyTerms(total_amount_cents=None, installment_amount_cents=None,
                           installments_total=None, installments_paid=None),
    )

    metrics = compute_metrics(plan)

    assert metrics.total_cents == 0
    assert metrics.total_installments == 0
    assert metrics.remaining_installments == 0
    assert metrics.remaining_balance_cents == 0
    assert metrics.progress_percent == 0


def test_legacy_overpaid_is_clamped():
    plan = InstallmentPlan(
        id="p",
        user_id="u",
        merchant="m",
        legacy=LegacyTerms(30000, 10000, installments_total=3, installments_paid=5),
    )

    metrics = compute_metrics(plan)

    assert metrics.remaining_installments == 0
    assert metrics.remaining_balance_cents == 0
    assert metrics.progress_percent == 100


def test_derive_status_completed_when_all_paid(legacy_plan):
    legacy_plan.legacy.installments_paid = 3

    assert derive_status(PlanStatus.OVERDUE, compute_metrics(legacy_plan)) == PlanStatus.COMPLETED


def test_derive_status_keeps_stored_status(itemized_plan):
    assert derive_status(PlanStatus.OVERDUE, compute_metrics(itemized_plan)) == PlanStatus.OVERDUE


def test_derive_status_empty_plan_not_completed():
    plan = InstallmentPlan(id="p", user_id="u", merchant="m")

    assert derive_status(PlanStatus.ACTIVE, compute_metrics(plan)) == PlanStatus.ACTIVE


def test_effective_status(legacy_plan):
    assert effective_status(legacy_plan) == PlanStatus.ACTIVE

    legacy_plan.legacy.installments_paid = 3
    assert effective_status(legacy_plan) == PlanStatus.COMPLETED
