"""Integration tests for the persistence layer"""

import pytest
from datetime import date
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from nvjmi_finance.domain.exceptions import ScheduleSaveError
from nvjmi_finance.domain.installments import generate_schedule, prepare_plan_fields
from nvjmi_finance.domain.models import Installment, PlanStatus
from nvjmi_finance.infrastructure.database.models import Account, BNPLInstallment, CreditCardStatement
from nvjmi_finance.infrastructure.database.repositories import (
    AccountRepository,
    PlanRepository,
    SettingsRepository,
    StatementRepository,
    to_domain_plan,
)


def create_plan(db: Session, user_id="user_1", installments=None, merchant="Shopee"):
    installments = installments or generate_schedule(1000, 3)
    repo = PlanRepository(db)
    db_plan = repo.create_plan(
        user_id=user_id,
        merchant=merchant,
        fields=prepare_plan_fields(installments, PlanStatus.ACTIVE),
        installments=installments,
    )
    db.commit()
    return db_plan


def test_create_plan_persists_schedule(db: Session):
    db_plan = create_plan(db)

    plan = to_domain_plan(PlanRepository(db).get_plan_by_id(db_plan.id))

    assert [inst.amount_cents for inst in plan.installments] == [334, 333, 333]
    assert [inst.sequence for inst in plan.installments] == [1, 2, 3]
    assert plan.legacy.total_amount_cents == 1000
    assert plan.legacy.installments_total == 3
    assert plan.status == PlanStatus.ACTIVE


def test_replace_installments_swaps_whole_batch(db: Session):
    db_plan = create_plan(db)
    repo = PlanRepository(db)

    repo.replace_installments(db_plan, generate_schedule(1000, 2))
    db.commit()

    rows = db.query(BNPLInstallment).filter(BNPLInstallment.plan_id == db_plan.id).all()
    assert sorted((row.sequence, row.amount_cents) for row in rows) == [(1, 500), (2, 500)]


def test_replace_installments_failure_rolls_back(db: Session, monkeypatch):
    """Test a failed swap leaves the original schedule intact after rollback"""
    db_plan = create_plan(db)
    plan_id = db_plan.id
    repo = PlanRepository(db)

    real_flush = db.flush
    calls = {"n": 0}

    def failing_flush(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:  # Fail after the delete, while inserting
            raise SQLAlchemyError("disk full")
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", failing_flush)

    with pytest.raises(ScheduleSaveError):
        repo.replace_installments(db_plan, generate_schedule(1000, 5))

    monkeypatch.setattr(db, "flush", real_flush)
    db.rollback()

    rows = db.query(BNPLInstallment).filter(BNPLInstallment.plan_id == plan_id).all()
    assert sorted(row.amount_cents for row in rows) == [333, 333, 334]


def test_plans_scoped_and_ordered(db: Session):
    later = [Installment(1, 500, due_date=date(2025, 7, 1))]
    sooner = [Installment(1, 500, due_date=date(2025, 6, 15))]
    create_plan(db, installments=later, merchant="Later")
    create_plan(db, installments=[Installment(1, 500)], merchant="Undated")
    create_plan(db, installments=sooner, merchant="Sooner")
    create_plan(db, user_id="someone_else", merchant="Other")

    plans = PlanRepository(db).get_plans_by_user("user_1")

    assert [p.merchant for p in plans] == ["Sooner", "Later", "Undated"]


def test_get_plan_by_id_checks_owner(db: Session):
    db_plan = create_plan(db)

    assert PlanRepository(db).get_plan_by_id(db_plan.id, user_id="intruder") is None


def test_accounts_and_statements(db: Session):
    db.add_all([
        Account(user_id="user_1", account_type="savings", provider="Maybank", name="Savings", balance_cents=100000),
        Account(user_id="user_1", account_type="ewallet", provider="TNG", name="Wallet", balance_cents=5000,
                is_active=False),
        CreditCardStatement(user_id="user_1", due_date=date(2025, 6, 20), minimum_payment_cents=5000),
        CreditCardStatement(user_id="user_1", due_date=date(2025, 6, 21), minimum_payment_cents=7000, status="paid"),
    ])
    db.commit()

    accounts = AccountRepository(db).get_active_accounts("user_1")
    statements = StatementRepository(db).get_pending_statements("user_1")

    assert [a.balance_cents for a in accounts] == [100000]
    assert [s.minimum_payment_cents for s in statements] == [5000]


def test_settings_upsert(db: Session):
    repo = SettingsRepository(db)

    repo.upsert_settings("user_1", 25, None)
    repo.upsert_settings("user_1", 28, date(2025, 6, 20))
    db.commit()

    row = repo.get_settings("user_1")
    assert row.payday == 28
    assert row.next_payday_override == date(2025, 6, 20)


def test_open_plans_due_between_is_uncapped_and_windowed(db: Session):
    for n in range(3):
        create_plan(db, installments=[Installment(1, 500, due_date=date(2025, 6, 12 + n))], merchant=f"Due {n}")
    create_plan(db, installments=[Installment(1, 500, due_date=date(2025, 7, 2))], merchant="After payday")
    create_plan(db, installments=[Installment(1, 500, due_date=date(2025, 6, 9))], merchant="Before today")
    create_plan(db, installments=[Installment(1, 500, is_paid=True, due_date=date(2025, 6, 15))], merchant="Paid")

    plans = PlanRepository(db).get_open_plans_due_between("user_1", date(2025, 6, 10), date(2025, 6, 30))

    assert [p.merchant for p in plans] == ["Due 0", "Due 1", "Due 2"]
