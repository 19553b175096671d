"""Conversion between store rows and domain models.

Rows from the REST backend carry ISO strings and JSON numbers; rows from the
SQL backend carry native date/Decimal values. Both are accepted here.

The store's `transaction_type` enum is "receita" | "despesa"; the domain
uses "income" | "expense". Every row crossing this module is translated.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from dateutil.parser import isoparse

from wallet_gateway.domain.exceptions import RecordStoreError, ValidationError
from wallet_gateway.domain.models import (
    EXPENSE,
    INCOME,
    BankAccount,
    Category,
    Debt,
    FinancialGoal,
    GoalContribution,
    RecurringTransaction,
    Transaction,
)
from wallet_gateway.infrastructure.store import Record

DEBTS = "debts"
TRANSACTIONS = "transactions"
RECURRING_TRANSACTIONS = "recurring_transactions"
BANK_ACCOUNTS = "bank_accounts"
CATEGORIES = "categories"
FINANCIAL_GOALS = "financial_goals"
GOAL_PROGRESS = "goal_progress"

STORE_TYPES = {INCOME: "receita", EXPENSE: "despesa"}
DOMAIN_TYPES = {stored: domain for domain, stored in STORE_TYPES.items()}


def to_store_type(value: str) -> str:
    try:
        return STORE_TYPES[value]
    except KeyError:
        raise ValidationError(f"Unknown transaction type: {value!r}") from None


def from_store_type(value: Any) -> str:
    try:
        return DOMAIN_TYPES[value]
    except KeyError:
        raise ValueError(f"unknown transaction_type {value!r}") from None


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _datetime(value: Any) -> Optional[datetime]:
    # isoparse accepts "Z" and any number of fractional-second digits
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return isoparse(str(value))


def _str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def debt_from_record(row: Record) -> Debt:
    try:
        return Debt(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row["name"],
            original_amount=_decimal(row["original_amount"]),
            current_amount=_decimal(row["current_amount"]),
            monthly_interest_rate=_decimal(row.get("monthly_interest_rate")),
            due_date=_date(row.get("due_date")),
            last_payment_date=_datetime(row.get("last_payment_date")),
            creditor=row.get("creditor"),
            description=row.get("description"),
            created_at=_datetime(row.get("created_at")),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid debt record: {e}") from e


def recurring_from_record(row: Record) -> RecurringTransaction:
    try:
        return RecurringTransaction(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            type=from_store_type(row["type"]),
            value=_decimal(row["value"]),
            description=row.get("description") or "",
            frequency=row["frequency"],
            start_date=_date(row["start_date"]),
            end_date=_date(row.get("end_date")),
            next_occurrence_date=_date(row["next_occurrence_date"]),
            bank_account_id=str(row["bank_account_id"]),
            category_id=_str(row.get("category_id")),
            created_at=_datetime(row.get("created_at")),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid recurring transaction record: {e}") from e


def recurring_to_record(series: RecurringTransaction) -> Record:
    """Writable columns of a series (id/created_at are store-assigned)"""
    return {
        "user_id": series.user_id,
        "type": to_store_type(series.type),
        "value": series.value,
        "description": series.description,
        "frequency": series.frequency,
        "start_date": series.start_date,
        "end_date": series.end_date,
        "next_occurrence_date": series.next_occurrence_date,
        "bank_account_id": series.bank_account_id,
        "category_id": series.category_id,
    }


def transaction_from_record(row: Record) -> Transaction:
    try:
        return Transaction(
            id=_str(row.get("id")),
            user_id=str(row["user_id"]),
            type=from_store_type(row["type"]),
            value=_decimal(row["value"]),
            description=row.get("description") or "",
            transaction_date=_date(row["transaction_date"]),
            bank_account_id=str(row["bank_account_id"]),
            category_id=_str(row.get("category_id")),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid transaction record: {e}") from e


def transaction_to_record(transaction: Transaction) -> Record:
    return {
        "user_id": transaction.user_id,
        "type": to_store_type(transaction.type),
        "value": transaction.value,
        "description": transaction.description or None,
        "transaction_date": transaction.transaction_date,
        "bank_account_id": transaction.bank_account_id,
        "category_id": transaction.category_id,
    }


def bank_account_from_record(row: Record) -> BankAccount:
    try:
        return BankAccount(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row["name"],
            initial_balance=_decimal(row.get("initial_balance")) or Decimal(0),
            description=row.get("description"),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid bank account record: {e}") from e


def category_from_record(row: Record) -> Category:
    try:
        return Category(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row["name"],
            type=from_store_type(row["type"]),
        )
    except (KeyError, ValueError) as e:
        raise RecordStoreError(f"Invalid category record: {e}") from e


def goal_from_record(row: Record) -> FinancialGoal:
    try:
        return FinancialGoal(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            type=from_store_type(row["type"]),
            target_value=_decimal(row["target_value"]),
            start_period=_date(row["start_period"]),
            end_period=_date(row["end_period"]),
            category_id=_str(row.get("category_id")),
            created_at=_datetime(row.get("created_at")),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid financial goal record: {e}") from e


def goal_to_record(goal: FinancialGoal) -> Record:
    return {
        "user_id": goal.user_id,
        "type": to_store_type(goal.type),
        "target_value": goal.target_value,
        "start_period": goal.start_period,
        "end_period": goal.end_period,
        "category_id": goal.category_id,
    }


def contribution_from_record(row: Record) -> GoalContribution:
    try:
        return GoalContribution(
            id=_str(row.get("id")),
            user_id=str(row["user_id"]),
            goal_id=str(row["goal_id"]),
            value=_decimal(row["value"]),
            progress_date=_date(row["progress_date"]),
            description=row.get("description"),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise RecordStoreError(f"Invalid goal progress record: {e}") from e


def contribution_to_record(contribution: GoalContribution) -> Record:
    return {
        "user_id": contribution.user_id,
        "goal_id": contribution.goal_id,
        "value": contribution.value,
        "description": contribution.description,
        "progress_date": contribution.progress_date,
    }
