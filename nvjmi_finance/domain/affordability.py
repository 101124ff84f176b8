"""Available-to-spend projection - liquid cash minus obligations due before payday"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from nvjmi_finance.domain.metrics import compute_metrics, effective_status
from nvjmi_finance.domain.models import (
    LIQUID_ACCOUNT_TYPES,
    Account,
    AvailableToSpend,
    CardStatement,
    InstallmentPlan,
    PlanStatus,
    SpendTier,
)
from nvjmi_finance.utils.date_utils import clamp_day_of_month, is_within, last_day_of_month


@dataclass
class AffordabilityPolicy:
    """Presentation thresholds for the spend tier (not hard financial limits)"""

    healthy_floor_cents: int = 50_000  # RM500


def resolve_next_payday(
    today: date,
    payday_day: Optional[int] = None,
    override: Optional[date] = None,
) -> date:
    """
    Work out the end of the affordability window.

    - A one-off override wins unless it has already passed
    - Else the next occurrence of the configured day of month (31 -> month end)
    - Else the last day of the current month
    """
    if override is not None and override >= today:
        return override

    if payday_day:
        this_month = clamp_day_of_month(today.year, today.month, payday_day)
        if this_month >= today:
            return this_month
        year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
        return clamp_day_of_month(year, month, payday_day)

    return last_day_of_month(today)


def classify_tier(available_cents: int, policy: AffordabilityPolicy | None = None) -> SpendTier:
    """
    Map available cash to a spend tier.

    Bands:
    - < 0:                 critical (bills exceed cash)
    - 0 .. healthy floor:  caution
    - >= healthy floor:    healthy
    """
    policy = policy or AffordabilityPolicy()
    if available_cents < 0:
        return SpendTier.CRITICAL
    elif available_cents < policy.healthy_floor_cents:
        return SpendTier.CAUTION
    else:
        return SpendTier.HEALTHY


def liquid_balance(accounts: Iterable[Account]) -> int:
    """Sum balances of active savings, checking and e-wallet accounts"""
    return sum(
        account.balance_cents or 0
        for account in accounts
        if account.is_active and account.account_type in LIQUID_ACCOUNT_TYPES
    )


def plan_dues_before(plans: Iterable[InstallmentPlan], today: date, next_payday: date) -> int:
    """Next installment of every unfinished plan whose due date falls in [today, payday]"""
    total = 0
    for plan in plans:
        if plan.next_due_date is None or effective_status(plan) == PlanStatus.COMPLETED:
            continue
        if not is_within(plan.next_due_date, today, next_payday):
            continue
        total += compute_metrics(plan).next_installment_cents or 0
    return total


def statement_dues_before(statements: Iterable[CardStatement], today: date, next_payday: date) -> int:
    """Minimum payment of every pending card statement due in [today, payday]"""
    return sum(
        statement.minimum_payment_cents or 0
        for statement in statements
        if statement.status == "pending" and is_within(statement.due_date, today, next_payday)
    )


def compute_available_to_spend(
    accounts: Iterable[Account],
    plans: Iterable[InstallmentPlan],
    statements: Iterable[CardStatement],
    today: date,
    next_payday: date,
    policy: AffordabilityPolicy | None = None,
) -> AvailableToSpend:
    """
    Main entry point: project spendable cash until the next payday.

    available = liquid balances
                - BNPL installments due before payday
                - card minimum payments due before payday

    Example:
        RM5,000 liquid, one RM500 installment due in 3 days, payday in 20
        -> due 50000, available 450000, healthy
    """
    liquid = liquid_balance(accounts)
    due = plan_dues_before(plans, today, next_payday) + statement_dues_before(statements, today, next_payday)
    available = liquid - due

    return AvailableToSpend(
        liquid_cents=liquid,
        due_before_payday_cents=due,
        available_cents=available,
        tier=classify_tier(available, policy),
        next_payday=next_payday,
    )
