"""Debt interest accrual and payment application"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from wallet_gateway.domain.exceptions import ValidationError
from wallet_gateway.domain.models import EXPENSE, Debt, DebtSummary, PaymentResult, Transaction
from wallet_gateway.utils.date_utils import as_utc, start_of_day_utc, whole_days_between

DAYS_PER_MONTH = 30
CENTS = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def accrual_base_date(debt: Debt) -> Optional[datetime]:
    """Instant interest compounds from: last payment if any, else the due date"""
    if debt.last_payment_date is not None:
        return as_utc(debt.last_payment_date)
    if debt.due_date is not None:
        return start_of_day_utc(debt.due_date)
    return None


def compute_current_amount(debt: Debt, now: datetime) -> Decimal:
    """
    Amount owed at `now`, including compounded monthly interest.

    Requirements:
    - No rate (or rate <= 0) or no due date: stored amount, unchanged
    - Interest starts after the due date, or after the last payment
    - Elapsed whole days are converted to months with a fixed 30-day month;
      fractional months feed straight into the exponent
    - Settled debts (stored amount <= 0) never accrue

    Example:
        current 1000, rate 10%, base 60 days ago
        months = 60 / 30 = 2 → 1000 × 1.1² = 1210.00
    """
    rate = debt.monthly_interest_rate
    if rate is None or rate <= 0 or debt.due_date is None:
        return debt.current_amount

    if debt.is_settled:
        return debt.current_amount

    base = accrual_base_date(debt)
    now = as_utc(now)

    # Not yet due
    if now <= base and debt.last_payment_date is None:
        return debt.current_amount

    elapsed_days = whole_days_between(base, now)
    if elapsed_days < 1:
        return debt.current_amount

    months_elapsed = Decimal(elapsed_days) / Decimal(DAYS_PER_MONTH)
    growth = (Decimal(1) + Decimal(rate) / Decimal(100)) ** months_elapsed
    return to_cents(debt.current_amount * growth)


def compute_progress(debt: Debt, now: datetime) -> float:
    """
    Percentage of the debt paid off, in [0, 100].

    Paid is measured against the stored current amount, so interest that has
    accrued since the last payment grows the denominator only.
    """
    if debt.is_settled:
        return 100.0

    actual_paid = max(Decimal(0), debt.original_amount - debt.current_amount)
    total_with_interest = compute_current_amount(debt, now) + actual_paid
    if total_with_interest <= 0:
        return 0.0

    percentage = float(actual_paid / total_with_interest * 100)
    return max(0.0, min(100.0, percentage))


def apply_payment(
    debt: Debt,
    payment_amount: Decimal,
    bank_account_id: Optional[str],
    now: datetime,
    description: Optional[str] = None,
) -> PaymentResult:
    """
    Validate a payment and work out both writes it causes.

    Nothing is written here; the caller inserts `result.transaction` and then
    updates the debt with `new_current_amount` / `last_payment_date`.

    Raises:
        ValidationError: non-positive amount, amount above what is owed,
            settled debt, or no bank account selected
    """
    if not bank_account_id:
        raise ValidationError("A bank account must be selected for the payment")

    if payment_amount is None or payment_amount <= 0:
        raise ValidationError("Payment amount must be positive")

    if debt.is_settled:
        raise ValidationError(f"Debt {debt.id} is already settled")

    owed = compute_current_amount(debt, now)
    if payment_amount > owed:
        raise ValidationError(f"Payment of {payment_amount} exceeds the amount owed ({owed})")

    now = as_utc(now)
    transaction = Transaction(
        user_id=debt.user_id,
        type=EXPENSE,
        value=payment_amount,
        description=(description or "").strip() or f"Payment of {debt.name}",
        transaction_date=now.date(),
        bank_account_id=bank_account_id,
    )

    return PaymentResult(
        transaction=transaction,
        amount_before=owed,
        new_current_amount=owed - payment_amount,
        last_payment_date=now,
    )


def days_until_due(debt: Debt, today: date) -> Optional[int]:
    """Days left until the due date (negative once overdue), None without one"""
    if debt.due_date is None:
        return None
    return (debt.due_date - today).days


def summarize_debts(debts: Iterable[Debt], now: datetime) -> DebtSummary:
    total_original = Decimal(0)
    total_current = Decimal(0)
    total_paid = Decimal(0)
    count = 0

    for debt in debts:
        total_original += debt.original_amount
        total_current += compute_current_amount(debt, now)
        total_paid += max(Decimal(0), debt.original_amount - debt.current_amount)
        count += 1

    return DebtSummary(
        total_original=total_original,
        total_current=total_current,
        total_paid=total_paid,
        debt_count=count,
    )
