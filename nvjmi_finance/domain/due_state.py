"""Due-date urgency classification for BNPL plans"""

from datetime import date

from nvjmi_finance.domain.metrics import effective_status
from nvjmi_finance.domain.models import DueKind, DueState, InstallmentPlan, PlanStatus, Tone
from nvjmi_finance.utils.date_utils import days_between

# Due within this many days is flagged as a warning
DUE_SOON_DAYS = 3


def _plural_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def classify_due_state(plan: InstallmentPlan, today: date) -> DueState:
    """
    Classify how urgent a plan's next payment is.

    Order of checks:
    - completed plans (stored or fully paid) are done, the due date is kept for display only
    - no due date: "Needs attention" if flagged overdue, else neutral
    - flagged overdue OR date in the past -> overdue (status wins over a stale future date)
    - today / tomorrow / in N days (warning up to 3 days out)
    """
    status = effective_status(plan)

    if status == PlanStatus.COMPLETED:
        return DueState(DueKind.COMPLETED, "Completed", Tone.SUCCESS, due_date=plan.next_due_date)

    if plan.next_due_date is None:
        if status == PlanStatus.OVERDUE:
            return DueState(DueKind.NO_DUE_DATE, "Needs attention", Tone.ERROR)
        return DueState(DueKind.NO_DUE_DATE, "No due date set", Tone.NEUTRAL)

    due_date = plan.next_due_date
    diff = days_between(due_date, today)

    if diff < 0 or status == PlanStatus.OVERDUE:
        days_late = abs(diff)
        return DueState(DueKind.OVERDUE, f"Overdue by {_plural_days(days_late)}", Tone.ERROR, days_late, due_date)
    if diff == 0:
        return DueState(DueKind.DUE_TODAY, "Due today", Tone.WARNING, 0, due_date)
    if diff == 1:
        return DueState(DueKind.DUE_TOMORROW, "Due tomorrow", Tone.WARNING, 1, due_date)

    tone = Tone.WARNING if diff <= DUE_SOON_DAYS else Tone.NEUTRAL
    return DueState(DueKind.DUE_IN_DAYS, f"Due in {diff} days", tone, diff, due_date)
