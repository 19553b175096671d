"""SQLAlchemy ORM models mirroring the hosted record store's tables"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class BankAccountRow(Base):
    """Bank account owned by a user; balances are derived, not stored"""

    __tablename__ = "bank_accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    initial_balance = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CategoryRow(Base):
    """Income or expense category"""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRow(Base):
    """Materialized income or expense; type is "receita" or "despesa" as in the hosted store"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=True)
    transaction_date = Column(Date, nullable=False)
    bank_account_id = Column(String(36), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class DebtRow(Base):
    """Debt with optional monthly interest"""

    __tablename__ = "debts"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    original_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False)
    monthly_interest_rate = Column(Numeric(7, 4), nullable=True)
    due_date = Column(Date, nullable=True)
    last_payment_date = Column(DateTime(timezone=True), nullable=True)
    creditor = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class RecurringTransactionRow(Base):
    """Recurring income/expense schedule"""

    __tablename__ = "recurring_transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=False)
    frequency = Column(Text, nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_occurrence_date = Column(Date, nullable=False)
    bank_account_id = Column(String(36), ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FinancialGoalRow(Base):
    """Income or expense target over a period"""

    __tablename__ = "financial_goals"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    target_value = Column(Numeric(14, 2), nullable=False)
    start_period = Column(Date, nullable=False)
    end_period = Column(Date, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GoalProgressRow(Base):
    """Contribution towards a goal, one row per goal and date"""

    __tablename__ = "goal_progress"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    goal_id = Column(String(36), ForeignKey("financial_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=True)
    progress_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


COLLECTIONS = {
    "bank_accounts": BankAccountRow,
    "categories": CategoryRow,
    "transactions": TransactionRow,
    "debts": DebtRow,
    "recurring_transactions": RecurringTransactionRow,
    "financial_goals": FinancialGoalRow,
    "goal_progress": GoalProgressRow,
}
