"""Installment schedule generation, redistribution and edit sessions for BNPL plans"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from nvjmi_finance.domain.exceptions import InstallmentNotFoundError, InvalidScheduleError
from nvjmi_finance.domain.metrics import derive_status, itemized_view, metrics_from_view
from nvjmi_finance.domain.models import Installment, PlanFields, PlanStatus
from nvjmi_finance.utils.date_utils import add_months
from nvjmi_finance.utils.money import divide_cents


def generate_schedule(
    total_cents: int,
    count: int,
    previous: Optional[List[Installment]] = None,
    first_due_date: date | None = None,
    interval_months: int = 1,
) -> List[Installment]:
    """
    Split a total into `count` installments that sum exactly to the total.

    Requirements:
    - Work in integer cents, no float drift
    - The first `remainder` installments carry one extra cent each
    - Paid flag, paid_at and due date carry over from `previous` by sequence
    - Non-positive total or count means "not configured yet": empty schedule

    Args:
        total_cents: Plan total to split
        count: Number of installments
        previous: Existing schedule to carry paid state and due dates from
        first_due_date: Optional due date for installment 1; later positions
            follow every `interval_months`. Only fills positions with no due date.
        interval_months: Months between generated due dates (default 1)

    Returns:
        List of Installment objects with sequence 1..count

    Example:
        1000 cents / 3 -> base 333, remainder 1 -> [334, 333, 333]
    """
    if total_cents <= 0 or count <= 0:
        return []

    base_amount = total_cents // count
    remainder = total_cents - base_amount * count
    carried: Dict[int, Installment] = {inst.sequence: inst for inst in previous or []}

    installments = []
    for index in range(count):
        sequence = index + 1
        prior = carried.get(sequence)

        due_date = prior.due_date if prior else None
        if due_date is None and first_due_date is not None:
            due_date = add_months(first_due_date, index * interval_months, first_due_date.day)

        installments.append(
            Installment(
                sequence=sequence,
                amount_cents=base_amount + (1 if index < remainder else 0),
                is_paid=prior.is_paid if prior else False,
                due_date=due_date,
                paid_at=prior.paid_at if prior and prior.is_paid else None,
            )
        )

    return installments


def redistribute_schedule(
    previous: List[Installment],
    total_cents: int,
    count: int,
    dirty: bool,
    force: bool = False,
) -> List[Installment]:
    """
    Recompute a schedule after the total or installment count changed.

    A clean schedule is regenerated right away. A dirty one (amounts edited by
    hand) is returned untouched until the user asks for an explicit
    redistribution (`force=True`). Shrinking the count drops paid state for the
    truncated positions.
    """
    if dirty and not force:
        return [replace(inst) for inst in previous]
    return generate_schedule(total_cents, count, previous=previous)


def schedule_mismatch(installments: List[Installment], total_cents: int, tolerance_cents: int = 5) -> Optional[int]:
    """Return schedule sum minus total when it drifts by at least the tolerance, else None"""
    if not installments:
        return None
    drift = sum(inst.amount_cents for inst in installments) - total_cents
    return drift if abs(drift) >= tolerance_cents else None


def validate_schedule(installments: List[Installment]) -> None:
    """
    Check a schedule is savable.

    Raises:
        InvalidScheduleError: Empty schedule, sequence gaps/duplicates, or an
            installment amount that is not positive
    """
    if not installments:
        raise InvalidScheduleError("Add at least one installment")

    sequences = sorted(inst.sequence for inst in installments)
    if sequences != list(range(1, len(installments) + 1)):
        raise InvalidScheduleError("Installments must be in sequence order without gaps")

    if any(inst.amount_cents <= 0 for inst in installments):
        raise InvalidScheduleError("Each installment needs a valid amount greater than zero")


def prepare_plan_fields(
    installments: List[Installment],
    requested_status: PlanStatus = PlanStatus.ACTIVE,
    next_due_date: date | None = None,
) -> PlanFields:
    """
    Derive the scalar plan columns stored next to a schedule on save.

    - total is the schedule sum, installment amount its half-up average
    - next due date: explicit value, else the first unpaid installment's date
    - status: completed once every installment is paid, else as requested
    """
    validate_schedule(installments)
    ordered = sorted(installments, key=lambda inst: inst.sequence)
    metrics = metrics_from_view(itemized_view(ordered))

    if next_due_date is None:
        next_due_date = next((inst.due_date for inst in ordered if not inst.is_paid), None)

    return PlanFields(
        total_amount_cents=metrics.total_cents,
        installment_amount_cents=divide_cents(metrics.total_cents, metrics.total_installments),
        installments_total=metrics.total_installments,
        installments_paid=metrics.paid_installments,
        next_due_date=next_due_date,
        status=derive_status(requested_status, metrics),
    )


class DraftState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass
class ScheduleDraft:
    """In-progress schedule edit; every transition below returns a new draft"""

    total_cents: int
    count: int
    installments: List[Installment] = field(default_factory=list)
    state: DraftState = DraftState.CLEAN

    @property
    def is_dirty(self) -> bool:
        return self.state == DraftState.DIRTY

    def mismatch(self, tolerance_cents: int = 5) -> Optional[int]:
        return schedule_mismatch(self.installments, self.total_cents, tolerance_cents)


def open_draft(total_cents: int, count: int, installments: Optional[List[Installment]] = None) -> ScheduleDraft:
    """Start an edit session; a saved schedule opens dirty so its amounts are kept"""
    if installments:
        ordered = sorted((replace(inst) for inst in installments), key=lambda inst: inst.sequence)
        return ScheduleDraft(total_cents, count, ordered, DraftState.DIRTY)
    return ScheduleDraft(total_cents, count, generate_schedule(total_cents, count), DraftState.CLEAN)


def change_total(draft: ScheduleDraft, total_cents: int) -> ScheduleDraft:
    installments = redistribute_schedule(draft.installments, total_cents, draft.count, draft.is_dirty)
    return replace(draft, total_cents=total_cents, installments=installments)


def change_count(draft: ScheduleDraft, count: int) -> ScheduleDraft:
    installments = redistribute_schedule(draft.installments, draft.total_cents, count, draft.is_dirty)
    return replace(draft, count=count, installments=installments)


def redistribute(draft: ScheduleDraft) -> ScheduleDraft:
    """Explicit reset to an even split; clears the dirty flag"""
    installments = redistribute_schedule(
        draft.installments, draft.total_cents, draft.count, draft.is_dirty, force=True
    )
    return replace(draft, installments=installments, state=DraftState.CLEAN)


def _update(draft: ScheduleDraft, sequence: int, **changes) -> List[Installment]:
    if not any(inst.sequence == sequence for inst in draft.installments):
        raise InstallmentNotFoundError(f"No installment #{sequence} in schedule")
    return [
        replace(inst, **changes) if inst.sequence == sequence else replace(inst)
        for inst in draft.installments
    ]


def edit_amount(draft: ScheduleDraft, sequence: int, amount_cents: int) -> ScheduleDraft:
    """Hand-edit one amount; the draft turns dirty and stops auto-regenerating"""
    installments = _update(draft, sequence, amount_cents=amount_cents)
    return replace(draft, installments=installments, state=DraftState.DIRTY)


def set_paid(draft: ScheduleDraft, sequence: int, paid: bool, paid_at: datetime | None = None) -> ScheduleDraft:
    current = next((inst for inst in draft.installments if inst.sequence == sequence), None)
    if current is None:
        raise InstallmentNotFoundError(f"No installment #{sequence} in schedule")

    if not paid:
        stamp = None
    elif current.is_paid:
        stamp = current.paid_at
    else:
        stamp = paid_at

    return replace(draft, installments=_update(draft, sequence, is_paid=paid, paid_at=stamp))


def set_due_date(draft: ScheduleDraft, sequence: int, due_date: date | None) -> ScheduleDraft:
    return replace(draft, installments=_update(draft, sequence, due_date=due_date))
