"""Recurring transaction scheduling"""

from dataclasses import replace
from datetime import date
from typing import Optional

from wallet_gateway.domain.exceptions import ValidationError
from wallet_gateway.domain.models import (
    DAILY,
    INCOME,
    EXPENSE,
    WEEKLY,
    YEARLY,
    Firing,
    RecurringDefinition,
    RecurringTransaction,
    Transaction,
)
from wallet_gateway.utils.date_utils import add_days, add_months, add_years

FIRST_OCCURRENCE_SUFFIX = "(first automatic occurrence)"
MANUAL_EXECUTION_SUFFIX = "(executed manually)"


def advance(from_date: date, frequency: str) -> date:
    """
    Next occurrence one frequency step after `from_date`.

    daily +1 day, weekly +7 days, monthly +1 calendar month, yearly +1
    calendar year. Anything else is treated as monthly.
    """
    if frequency == DAILY:
        return add_days(from_date, 1)
    if frequency == WEEKLY:
        return add_days(from_date, 7)
    if frequency == YEARLY:
        return add_years(from_date, 1)
    return add_months(from_date, 1)


def is_active(end_date: Optional[date], today: date) -> bool:
    """A series is active while it has no end date or the end date is not past"""
    return end_date is None or end_date >= today


def days_until_next(series: RecurringTransaction, today: date) -> int:
    return (series.next_occurrence_date - today).days


def is_overdue(series: RecurringTransaction, today: date) -> bool:
    """Display-only: overdue series are never fired automatically"""
    return is_active(series.end_date, today) and series.next_occurrence_date < today


def validate_definition(definition: RecurringDefinition) -> None:
    if definition.type not in (INCOME, EXPENSE):
        raise ValidationError(f"Unknown transaction type: {definition.type!r}")
    if not (definition.description or "").strip():
        raise ValidationError("Description is required")
    if definition.value is None or definition.value <= 0:
        raise ValidationError("Value must be positive")
    if not definition.bank_account_id:
        raise ValidationError("A bank account is required")
    if definition.start_date is None:
        raise ValidationError("Start date is required")


def _materialize(
    user_id: str,
    definition,
    transaction_date: date,
    suffix: str,
) -> Transaction:
    return Transaction(
        user_id=user_id,
        type=definition.type,
        value=definition.value,
        description=f"{definition.description.strip()} {suffix}",
        transaction_date=transaction_date,
        bank_account_id=definition.bank_account_id,
        category_id=definition.category_id,
    )


def plan_creation(user_id: str, definition: RecurringDefinition, today: date) -> Firing:
    """
    Decide whether a new series fires right away and where its schedule starts.

    Requirements:
    - Fires immediately iff start <= today and (no end date or end date > today)
    - When firing, the first transaction is dated at the start date and the
      schedule advances one step from the start date
    - Otherwise nothing is materialized and the first occurrence is the start date

    Example:
        monthly, start 2024-01-01, today 2024-01-01
        → transaction dated 2024-01-01, next occurrence 2024-02-01
    """
    validate_definition(definition)
    start = definition.start_date
    end = definition.end_date

    fire_now = start <= today and (end is None or end > today)
    if not fire_now:
        return Firing(transaction=None, next_occurrence_date=start)

    return Firing(
        transaction=_materialize(user_id, definition, start, FIRST_OCCURRENCE_SUFFIX),
        next_occurrence_date=advance(start, definition.frequency),
    )


def plan_execution(series: RecurringTransaction, today: date) -> Firing:
    """Manual "execute now": a transaction dated today and a schedule one step on.

    Nothing prevents firing twice on the same day.
    """
    return Firing(
        transaction=_materialize(series.user_id, series, today, MANUAL_EXECUTION_SUFFIX),
        next_occurrence_date=advance(series.next_occurrence_date, series.frequency),
    )


def plan_edit(
    series: RecurringTransaction,
    definition: RecurringDefinition,
    today: date,
) -> RecurringTransaction:
    """
    Apply an edit form to a series.

    - A frequency change restarts the schedule one new step from today; the
      old phase is dropped
    - If the series is (still or again) running and the next occurrence is
      today or earlier, it moves to tomorrow so nothing fires retroactively
    - Everything else is replaced as submitted
    """
    validate_definition(definition)
    next_occurrence = series.next_occurrence_date

    if definition.frequency != series.frequency:
        next_occurrence = advance(today, definition.frequency)

    end = definition.end_date
    if (end is None or end > today) and next_occurrence <= today:
        next_occurrence = add_days(today, 1)

    return replace(
        series,
        type=definition.type,
        value=definition.value,
        description=definition.description.strip(),
        frequency=definition.frequency,
        start_date=definition.start_date,
        end_date=end,
        bank_account_id=definition.bank_account_id,
        category_id=definition.category_id,
        next_occurrence_date=next_occurrence,
    )


def pause(series: RecurringTransaction, today: date) -> RecurringTransaction:
    return replace(series, end_date=today)


def reactivate(series: RecurringTransaction, today: date) -> RecurringTransaction:
    """Clear the end date and restart the schedule from today, whatever it was"""
    return replace(series, end_date=None, next_occurrence_date=today)
