"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class PlanStatus(str, Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class DueKind(str, Enum):
    COMPLETED = "completed"
    NO_DUE_DATE = "no_due_date"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    DUE_IN_DAYS = "due_in_days"


class Tone(str, Enum):
    """Presentation urgency attached to a due state"""

    SUCCESS = "success"
    NEUTRAL = "neutral"
    WARNING = "warning"
    ERROR = "error"


class SpendTier(str, Enum):
    CRITICAL = "critical"
    CAUTION = "caution"
    HEALTHY = "healthy"


LIQUID_ACCOUNT_TYPES = frozenset({"savings", "checking", "ewallet"})


@dataclass
class Installment:
    """Single payment in a plan's schedule"""

    sequence: int
    amount_cents: int
    is_paid: bool = False
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None


@dataclass
class LegacyTerms:
    """Flat plan fields, the source of truth only when a plan has no itemized schedule"""

    total_amount_cents: Optional[int] = 0
    installment_amount_cents: Optional[int] = 0
    installments_total: Optional[int] = 0
    installments_paid: Optional[int] = 0


@dataclass
class InstallmentPlan:
    """BNPL purchase with either an itemized schedule or legacy flat terms"""

    id: str
    user_id: str
    merchant: str
    status: PlanStatus = PlanStatus.ACTIVE
    installments: List[Installment] = field(default_factory=list)
    legacy: LegacyTerms = field(default_factory=LegacyTerms)
    next_due_date: Optional[date] = None
    item_name: Optional[str] = None
    account_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.item_name or self.merchant


@dataclass
class ScheduleView:
    """Normalized schedule figures shared by itemized and legacy plans"""

    total_cents: int
    total_installments: int
    paid_installments: int
    remaining_balance_cents: int
    next_installment_cents: Optional[int]


@dataclass
class PlanMetrics:
    """Derived payment progress for a plan, recomputed on every read"""

    total_cents: int
    total_installments: int
    paid_installments: int
    remaining_installments: int
    remaining_balance_cents: int
    next_installment_cents: Optional[int]
    progress_percent: int


@dataclass
class DueState:
    """Due-date urgency for a plan"""

    kind: DueKind
    label: str
    tone: Tone
    days: Optional[int] = None
    due_date: Optional[date] = None


@dataclass
class PlanFields:
    """Scalar plan columns derived from a schedule at save time"""

    total_amount_cents: int
    installment_amount_cents: int
    installments_total: int
    installments_paid: int
    next_due_date: Optional[date]
    status: PlanStatus


@dataclass
class Account:
    """Funding account with a balance"""

    id: str
    account_type: str  # savings | checking | credit_card | bnpl | ewallet
    balance_cents: int = 0
    name: str = ""
    is_active: bool = True


@dataclass
class CardStatement:
    """Credit-card statement obligation"""

    id: str
    due_date: date
    minimum_payment_cents: int
    status: str = "pending"  # pending | paid | overdue
    total_amount_cents: int = 0


@dataclass
class AvailableToSpend:
    """Liquid balance after obligations due before the next payday"""

    liquid_cents: int
    due_before_payday_cents: int
    available_cents: int
    tier: SpendTier
    next_payday: date


@dataclass
class PortfolioSummary:
    """Aggregate view across all of a user's plans"""

    active_count: int
    overdue_count: int
    completed_count: int
    outstanding_cents: int
    monthly_commitments_cents: int
    next_plan: Optional[InstallmentPlan] = None
    next_due_state: Optional[DueState] = None
