"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, UUID4, field_validator
from datetime import date, datetime
from typing import List, Optional

from nvjmi_finance.domain.installments import DraftState
from nvjmi_finance.domain.models import DueKind, PlanStatus, SpendTier, Tone

# Longest schedule accepted from clients (ten years of monthly payments)
MAX_INSTALLMENTS = 120


class InstallmentSchema(BaseModel):
    """Single installment in a schedule"""

    sequence: int = Field(..., ge=1, description="1-based position in the schedule")
    amount_cents: int
    is_paid: bool = False
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None


class PlanRequest(BaseModel):
    """
    Body for POST /v1/plans and PUT /v1/plans/{plan_id}.

    Either send `installments` explicitly or let the service split
    `total_amount_cents` over `installment_count`.
    """

    user_id: str = Field(..., min_length=1, description="User identifier")
    account_id: Optional[UUID4] = None
    merchant: str = Field(..., min_length=1, max_length=255)
    item_name: Optional[str] = Field(default=None, max_length=255)
    total_amount_cents: int = Field(..., gt=0, description="Plan total in cents")
    installment_count: Optional[int] = Field(default=None, ge=1, le=MAX_INSTALLMENTS)
    installments: Optional[List[InstallmentSchema]] = Field(default=None, max_length=MAX_INSTALLMENTS)
    first_due_date: Optional[date] = Field(default=None, description="Due date for a generated installment 1")
    next_due_date: Optional[date] = None
    status: PlanStatus = PlanStatus.ACTIVE
    notes: Optional[str] = None

    @field_validator("merchant")
    @classmethod
    def strip_merchant(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Merchant is required")
        return value


class PaymentRequest(BaseModel):
    """Body for marking an installment paid or unpaid"""

    user_id: str = Field(..., min_length=1)
    paid: bool = True
    paid_at: Optional[datetime] = None


class PlanMetricsSchema(BaseModel):
    total_cents: int
    total_installments: int
    paid_installments: int
    remaining_installments: int
    remaining_balance_cents: int
    next_installment_cents: Optional[int] = None
    progress_percent: int


class DueStateSchema(BaseModel):
    kind: DueKind
    label: str
    tone: Tone
    days: Optional[int] = None
    due_date: Optional[date] = None


class PlanResponse(BaseModel):
    """Plan with its schedule and derived view-models"""

    plan_id: str
    user_id: str
    account_id: Optional[str] = None
    merchant: str
    item_name: Optional[str] = None
    status: PlanStatus
    next_due_date: Optional[date] = None
    notes: Optional[str] = None
    installments: List[InstallmentSchema]
    metrics: PlanMetricsSchema
    due_state: DueStateSchema
    warnings: List[str] = []


class PortfolioSchema(BaseModel):
    active_count: int
    overdue_count: int
    completed_count: int
    outstanding_cents: int
    monthly_commitments_cents: int
    next_plan_id: Optional[str] = None
    next_due_state: Optional[DueStateSchema] = None


class PlanListResponse(BaseModel):
    """Response for GET /v1/plans"""

    user_id: str
    summary: PortfolioSchema
    plans: List[PlanResponse]


class SchedulePreviewRequest(BaseModel):
    """An in-progress schedule edit sent back for redistribution"""

    total_amount_cents: int
    installment_count: int = Field(..., le=MAX_INSTALLMENTS)
    installments: List[InstallmentSchema] = Field(default=[], max_length=MAX_INSTALLMENTS)
    state: DraftState = DraftState.CLEAN
    redistribute: bool = False


class SchedulePreviewResponse(BaseModel):
    total_amount_cents: int
    installment_count: int
    installments: List[InstallmentSchema]
    state: DraftState
    mismatch_cents: Optional[int] = None
    warnings: List[str] = []


class AvailableToSpendResponse(BaseModel):
    """Response for GET /v1/dashboard/available-to-spend"""

    user_id: str
    liquid_cents: int
    due_before_payday_cents: int
    available_cents: int
    tier: SpendTier
    next_payday: date
    display: str


class BudgetSettingsRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    payday: Optional[int] = Field(default=None, ge=1, le=31, description="Day of month")
    next_payday_override: Optional[date] = None
    monthly_budget_cents: Optional[int] = Field(default=None, ge=0)


class BudgetSettingsResponse(BaseModel):
    user_id: str
    payday: Optional[int] = None
    next_payday_override: Optional[date] = None
    monthly_budget_cents: Optional[int] = None
    next_payday: date
