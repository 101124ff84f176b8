"""SQLAlchemy ORM models for plans, installments, accounts and budget settings"""

import uuid
from sqlalchemy import (
    Column,
    String,
    BigInteger,
    Boolean,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Account(Base):
    """Funding / provider account"""

    __tablename__ = "account"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    account_type = Column(String(32), nullable=False)  # savings | checking | credit_card | bnpl | ewallet
    provider = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plans = relationship("BNPLPlan", back_populates="account")


class BNPLPlan(Base):
    """Buy-now-pay-later purchase; scalar amount columns mirror the schedule when one exists"""

    __tablename__ = "bnpl_plan"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    account_id = Column(UUID(as_uuid=True), ForeignKey("account.id", ondelete="SET NULL"), nullable=True)
    merchant = Column(Text, nullable=False)
    item_name = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="active")
    notes = Column(Text, nullable=True)
    next_due_date = Column(Date, nullable=True)

    # Legacy flat terms
    total_amount_cents = Column(BigInteger, nullable=True)
    installment_amount_cents = Column(BigInteger, nullable=True)
    installments_total = Column(Integer, nullable=True)
    installments_paid = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    account = relationship("Account", back_populates="plans")
    installments = relationship(
        "BNPLInstallment",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="BNPLInstallment.sequence",
    )


class BNPLInstallment(Base):
    """Individual installment within a plan's schedule"""

    __tablename__ = "bnpl_installment"
    __table_args__ = (UniqueConstraint("plan_id", "sequence", name="uq_bnpl_installment_sequence"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_id = Column(UUID(as_uuid=True), ForeignKey("bnpl_plan.id", ondelete="CASCADE"), nullable=False)
    sequence = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    due_date = Column(Date, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plan = relationship("BNPLPlan", back_populates="installments")


class CreditCardStatement(Base):
    """Monthly card statement; pending minimum payments count against available cash"""

    __tablename__ = "credit_card_statement"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    account_id = Column(UUID(as_uuid=True), ForeignKey("account.id", ondelete="CASCADE"), nullable=True)
    statement_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=False)
    total_amount_cents = Column(BigInteger, nullable=False, default=0)
    minimum_payment_cents = Column(BigInteger, nullable=False, default=0)
    paid_amount_cents = Column(BigInteger, nullable=False, default=0)
    status = Column(String(16), nullable=False, default="pending")  # pending | paid | overdue
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BudgetSettings(Base):
    """Per-user payday configuration"""

    __tablename__ = "budget_settings"

    user_id = Column(Text, primary_key=True)
    payday = Column(Integer, nullable=True)  # Day of month 1-31
    next_payday_override = Column(Date, nullable=True)
    monthly_budget_cents = Column(BigInteger, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
