"""POST /v1/schedule/preview - redistribute an in-progress schedule edit"""

from dataclasses import replace
from fastapi import APIRouter

from nvjmi_finance.api.v1.presenters import installment_schemas
from nvjmi_finance.api.v1.schemas import SchedulePreviewRequest, SchedulePreviewResponse
from nvjmi_finance.config import settings
from nvjmi_finance.domain.installments import ScheduleDraft, redistribute, redistribute_schedule
from nvjmi_finance.domain.models import Installment
from nvjmi_finance.infrastructure.observability.metrics import schedule_regeneration_counter
from nvjmi_finance.utils.money import format_money

router = APIRouter()


@router.post("/schedule/preview", response_model=SchedulePreviewResponse)
def preview_schedule(body: SchedulePreviewRequest):
    """
    Recompute a schedule for the plan form.

    The client owns the edit session and sends its state back each time:
    - clean: amounts follow the total and count
    - dirty: hand-edited amounts are kept as sent
    - redistribute=true: reset to an even split and return a clean state
    """
    draft = ScheduleDraft(
        total_cents=body.total_amount_cents,
        count=body.installment_count,
        installments=[Installment(**inst.model_dump()) for inst in body.installments],
        state=body.state,
    )

    if body.redistribute:
        draft = redistribute(draft)
    else:
        draft = replace(
            draft,
            installments=redistribute_schedule(draft.installments, draft.total_cents, draft.count, draft.is_dirty),
        )

    if not draft.is_dirty:
        schedule_regeneration_counter.inc()

    drift = draft.mismatch(settings.schedule_mismatch_tolerance_cents)
    warnings = []
    if drift is not None:
        warnings.append(
            f"Installments are {format_money(abs(drift), settings.currency_symbol)} "
            f"{'over' if drift > 0 else 'under'} the total"
        )

    return SchedulePreviewResponse(
        total_amount_cents=draft.total_cents,
        installment_count=draft.count,
        installments=installment_schemas(draft.installments),
        state=draft.state,
        mismatch_cents=drift,
        warnings=warnings,
    )
