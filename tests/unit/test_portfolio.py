"""Unit tests for the plan portfolio summary"""

from datetime import date
from nvjmi_finance.domain.models import DueKind, Installment, InstallmentPlan, LegacyTerms, PlanStatus
from nvjmi_finance.domain.portfolio import summarize_portfolio


def test_summary_counts_and_commitments(itemized_plan, legacy_plan, today):
    overdue = InstallmentPlan(
        id="late",
        user_id="user_1",
        merchant="Lazada",
        status=PlanStatus.OVERDUE,
        installments=[Installment(1, 2500), Installment(2, 2500)],
        next_due_date=date(2025, 6, 1),
    )
    done = InstallmentPlan(
        id="done",
        user_id="user_1",
        merchant="Zalora",
        status=PlanStatus.COMPLETED,
        installments=[Installment(1, 900, is_paid=True)],
    )

    summary = summarize_portfolio([itemized_plan, legacy_plan, overdue, done], today)

    assert summary.active_count == 2
    assert summary.overdue_count == 1
    assert summary.completed_count == 1
    assert summary.outstanding_cents == 666 + 20000  # Active plans only
    assert summary.monthly_commitments_cents == 333 + 10000
    assert summary.next_plan is overdue  # Earliest due date among overdue + active
    assert summary.next_due_state.kind == DueKind.OVERDUE


def test_summary_empty(today):
    summary = summarize_portfolio([], today)

    assert summary.active_count == 0
    assert summary.outstanding_cents == 0
    assert summary.next_plan is None
    assert summary.next_due_state is None


def test_summary_counts_fully_paid_plan_as_completed(itemized_plan, today):
    paid_off = InstallmentPlan(
        id="paid-off",
        user_id="user_1",
        merchant="Atome",
        status=PlanStatus.ACTIVE,
        legacy=LegacyTerms(30000, 10000, 3, 3),
        next_due_date=date(2025, 6, 12),
    )

    summary = summarize_portfolio([itemized_plan, paid_off], today)

    assert summary.active_count == 1
    assert summary.completed_count == 1
    assert summary.outstanding_cents == 666
    assert summary.monthly_commitments_cents == 333
    assert summary.next_plan is itemized_plan
