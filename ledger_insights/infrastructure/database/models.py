"""SQLAlchemy ORM models for the ledger records read by the reporting core"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

EXPENSE_TYPE_FIXED = "fixed"
EXPENSE_TYPE_VARIABLE = "variable"


class IncomeRecord(Base):
    """Income received by an account"""

    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    gross_amount = Column(Float, nullable=False)
    tax_amount = Column(Float, nullable=False, default=0.0)
    net_amount = Column(Float, nullable=False)
    description = Column(Text, nullable=False, default="")


class ExpenseRecord(Base):
    """Fixed or variable expense"""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)  # fixed | variable
    category = Column(Text, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)


class BillRecord(Base):
    """Bill with a due date"""

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    paid = Column(Boolean, nullable=False, default=False)
    category = Column(Text, nullable=False, default="")


class CreditCardRecord(Base):
    """Credit card owning installment plans"""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    closing_day = Column(Integer, nullable=False, default=1)
    due_day = Column(Integer, nullable=False, default=10)
    limit_amount = Column(Float, nullable=True)

    installments = relationship("InstallmentRecord", back_populates="credit_card", cascade="all, delete-orphan")


class InstallmentRecord(Base):
    """Installment purchase on a credit card"""

    __tablename__ = "installments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    total_amount = Column(Float, nullable=False)
    installment_amount = Column(Float, nullable=False)
    total_installments = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    category = Column(Text, nullable=False, default="")

    credit_card = relationship("CreditCardRecord", back_populates="installments")


class GroupMemberRecord(Base):
    """Membership of a user in a family group"""

    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)


class GroupGoalRecord(Base):
    """Shared savings goal of a family group"""

    __tablename__ = "group_goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, nullable=False, default=0.0)
    status = Column(String(16), nullable=False, default="active")


class SettingRecord(Base):
    """Runtime configuration key/value pair"""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(Text, nullable=False, default="")


class HealthScoreRecord(Base):
    """Append-only health score history"""

    __tablename__ = "health_scores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)
    group_id = Column(Integer, nullable=True, index=True)
    score = Column(Float, nullable=False)
    savings_score = Column(Float, nullable=False)
    debt_score = Column(Float, nullable=False)
    goal_score = Column(Float, nullable=False)
    budget_score = Column(Float, nullable=False)
    calculated_at = Column(DateTime(timezone=True), nullable=False, index=True)
