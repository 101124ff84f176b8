"""Data access layer for BNPL plans, accounts, card statements and budget settings"""

import uuid
from datetime import date
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from nvjmi_finance.infrastructure.database.models import (
    Account,
    BNPLInstallment,
    BNPLPlan,
    BudgetSettings,
    CreditCardStatement,
)
from nvjmi_finance.domain import models as domain
from nvjmi_finance.domain.exceptions import ScheduleSaveError


def to_domain_plan(db_plan: BNPLPlan) -> domain.InstallmentPlan:
    """Map an ORM plan (with its schedule) onto the domain dataclass"""
    return domain.InstallmentPlan(
        id=str(db_plan.id),
        user_id=db_plan.user_id,
        merchant=db_plan.merchant,
        status=domain.PlanStatus(db_plan.status),
        installments=[to_domain_installment(inst) for inst in db_plan.installments],
        legacy=domain.LegacyTerms(
            total_amount_cents=db_plan.total_amount_cents,
            installment_amount_cents=db_plan.installment_amount_cents,
            installments_total=db_plan.installments_total,
            installments_paid=db_plan.installments_paid,
        ),
        next_due_date=db_plan.next_due_date,
        item_name=db_plan.item_name,
        account_id=str(db_plan.account_id) if db_plan.account_id else None,
        notes=db_plan.notes,
    )


def to_domain_installment(db_installment: BNPLInstallment) -> domain.Installment:
    return domain.Installment(
        sequence=db_installment.sequence,
        amount_cents=db_installment.amount_cents,
        is_paid=db_installment.is_paid,
        due_date=db_installment.due_date,
        paid_at=db_installment.paid_at,
    )


class PlanRepository:
    """Repository for BNPL plans and their installment schedules"""

    def __init__(self, db: Session):
        self.db = db

    def create_plan(
        self,
        user_id: str,
        merchant: str,
        fields: domain.PlanFields,
        installments: List[domain.Installment],
        item_name: Optional[str] = None,
        account_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> BNPLPlan:
        """Create plan with its schedule (flushed, not committed)"""
        db_plan = BNPLPlan(
            user_id=user_id,
            account_id=account_id,
            merchant=merchant,
            item_name=item_name,
            notes=notes,
        )
        self._apply_fields(db_plan, fields)

        try:
            self.db.add(db_plan)
            self.db.flush()
        except SQLAlchemyError as e:
            raise ScheduleSaveError(f"Could not create plan: {e}") from e

        self.replace_installments(db_plan, installments)
        return db_plan

    def update_plan(
        self,
        db_plan: BNPLPlan,
        merchant: str,
        fields: domain.PlanFields,
        installments: List[domain.Installment],
        item_name: Optional[str] = None,
        account_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> BNPLPlan:
        """Update scalar fields and swap in the new schedule"""
        db_plan.merchant = merchant
        db_plan.item_name = item_name
        db_plan.account_id = account_id
        db_plan.notes = notes
        self._apply_fields(db_plan, fields)
        self.replace_installments(db_plan, installments)
        return db_plan

    def replace_installments(self, db_plan: BNPLPlan, installments: List[domain.Installment]) -> None:
        """
        Delete the plan's installment batch and insert the new one.

        Both steps share the caller's transaction: the caller commits on
        success and rolls back on ScheduleSaveError, so a plan never ends up
        with a mix of old and new installments.

        Raises:
            ScheduleSaveError: On any database failure during the swap
        """
        try:
            db_plan.installments.clear()
            self.db.flush()  # Old rows must be gone before sequences are reused

            for inst in sorted(installments, key=lambda i: i.sequence):
                db_plan.installments.append(
                    BNPLInstallment(
                        sequence=inst.sequence,
                        amount_cents=inst.amount_cents,
                        is_paid=inst.is_paid,
                        due_date=inst.due_date,
                        paid_at=inst.paid_at if inst.is_paid else None,
                    )
                )
            self.db.flush()
        except SQLAlchemyError as e:
            raise ScheduleSaveError(f"Could not replace installments for plan {db_plan.id}: {e}") from e

    def apply_fields(self, db_plan: BNPLPlan, fields: domain.PlanFields) -> None:
        """Write derived scalar fields back after an installment changes state"""
        self._apply_fields(db_plan, fields)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise ScheduleSaveError(f"Could not update plan {db_plan.id}: {e}") from e

    def get_plan_by_id(self, plan_id: uuid.UUID, user_id: Optional[str] = None) -> Optional[BNPLPlan]:
        """Fetch plan with installments, optionally scoped to its owner"""
        query = self.db.query(BNPLPlan).filter(BNPLPlan.id == plan_id)
        if user_id is not None:
            query = query.filter(BNPLPlan.user_id == user_id)
        return query.first()

    def get_plans_by_user(self, user_id: str, limit: Optional[int] = None) -> List[BNPLPlan]:
        """Fetch a user's plans, soonest due first, undated plans last"""
        query = (
            self.db.query(BNPLPlan)
            .filter(BNPLPlan.user_id == user_id)
            .order_by(
                BNPLPlan.next_due_date.is_(None),
                BNPLPlan.next_due_date.asc(),
                BNPLPlan.created_at.desc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_open_plans_due_between(self, user_id: str, start: date, end: date) -> List[BNPLPlan]:
        """
        Fetch every plan not stored as completed whose next due date is in [start, end].

        Uncapped: the affordability window must see all of them. Plans that
        are fully paid but still stored as active are filtered out by the caller.
        """
        return (
            self.db.query(BNPLPlan)
            .filter(
                BNPLPlan.user_id == user_id,
                BNPLPlan.status != domain.PlanStatus.COMPLETED.value,
                BNPLPlan.next_due_date.between(start, end),
            )
            .order_by(BNPLPlan.next_due_date.asc())
            .all()
        )

    @staticmethod
    def _apply_fields(db_plan: BNPLPlan, fields: domain.PlanFields) -> None:
        db_plan.total_amount_cents = fields.total_amount_cents
        db_plan.installment_amount_cents = fields.installment_amount_cents
        db_plan.installments_total = fields.installments_total
        db_plan.installments_paid = fields.installments_paid
        db_plan.next_due_date = fields.next_due_date
        db_plan.status = domain.PlanStatus(fields.status).value


class AccountRepository:
    """Read access to funding accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_accounts(self, user_id: str) -> List[domain.Account]:
        rows = (
            self.db.query(Account)
            .filter(Account.user_id == user_id, Account.is_active.is_(True))
            .order_by(Account.name)
            .all()
        )
        return [
            domain.Account(
                id=str(row.id),
                account_type=row.account_type,
                balance_cents=row.balance_cents or 0,
                name=row.name,
                is_active=row.is_active,
            )
            for row in rows
        ]


class StatementRepository:
    """Read access to credit-card statements"""

    def __init__(self, db: Session):
        self.db = db

    def get_pending_statements(self, user_id: str) -> List[domain.CardStatement]:
        rows = (
            self.db.query(CreditCardStatement)
            .filter(CreditCardStatement.user_id == user_id, CreditCardStatement.status == "pending")
            .order_by(CreditCardStatement.due_date.asc())
            .all()
        )
        return [
            domain.CardStatement(
                id=str(row.id),
                due_date=row.due_date,
                minimum_payment_cents=row.minimum_payment_cents or 0,
                status=row.status,
                total_amount_cents=row.total_amount_cents or 0,
            )
            for row in rows
        ]


class SettingsRepository:
    """Repository for per-user budget settings"""

    def __init__(self, db: Session):
        self.db = db

    def get_settings(self, user_id: str) -> Optional[BudgetSettings]:
        return self.db.query(BudgetSettings).filter(BudgetSettings.user_id == user_id).first()

    def upsert_settings(
        self,
        user_id: str,
        payday: Optional[int],
        next_payday_override: Optional[date],
        monthly_budget_cents: Optional[int] = None,
    ) -> BudgetSettings:
        """Insert or update a user's settings row (flushed, not committed)"""
        row = self.get_settings(user_id)
        if row is None:
            row = BudgetSettings(user_id=user_id)
            self.db.add(row)

        row.payday = payday
        row.next_payday_override = next_payday_override
        row.monthly_budget_cents = monthly_budget_cents
        self.db.flush()
        return row
