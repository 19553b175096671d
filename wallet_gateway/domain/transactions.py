"""Manual transactions and transfers between accounts"""

from datetime import date
from decimal import Decimal
from typing import Optional

from wallet_gateway.domain.exceptions import ValidationError
from wallet_gateway.domain.models import (
    EXPENSE,
    INCOME,
    AccountBalance,
    BankAccount,
    Transaction,
    TransactionDefinition,
    Transfer,
)

DEFAULT_TRANSFER_DESCRIPTION = "Transfer between accounts"


def validate_transaction(definition: TransactionDefinition) -> None:
    if definition.type not in (INCOME, EXPENSE):
        raise ValidationError(f"Unknown transaction type: {definition.type!r}")
    if definition.value is None or definition.value <= 0:
        raise ValidationError("Value must be positive")
    if not definition.bank_account_id:
        raise ValidationError("A bank account is required")
    if definition.transaction_date is None:
        raise ValidationError("Transaction date is required")


def build_transaction(user_id: str, definition: TransactionDefinition) -> Transaction:
    validate_transaction(definition)
    return Transaction(
        user_id=user_id,
        type=definition.type,
        value=definition.value,
        description=(definition.description or "").strip(),
        transaction_date=definition.transaction_date,
        bank_account_id=definition.bank_account_id,
        category_id=definition.category_id or None,
    )


def matches_search(transaction: Transaction, search: Optional[str], category_name: Optional[str] = None) -> bool:
    """Case-insensitive match on the description or the category name"""
    if not search:
        return True
    needle = search.lower()
    return needle in (transaction.description or "").lower() or needle in (category_name or "").lower()


def plan_transfer(
    source: AccountBalance,
    destination: BankAccount,
    amount: Decimal,
    description: Optional[str],
    today: date,
) -> Transfer:
    """
    Build the expense/income pair for a transfer.

    Raises:
        ValidationError: non-positive amount, same account on both sides, or
            an amount above the source account's current balance
    """
    if amount is None or amount <= 0:
        raise ValidationError("Transfer amount must be positive")
    if source.account.id == destination.id:
        raise ValidationError("Source and destination accounts must differ")
    if source.current_balance < amount:
        raise ValidationError(
            f"Insufficient balance in {source.account.name}: {source.current_balance} < {amount}"
        )

    label = (description or "").strip() or DEFAULT_TRANSFER_DESCRIPTION
    user_id = source.account.user_id

    return Transfer(
        expense=Transaction(
            user_id=user_id,
            type=EXPENSE,
            value=amount,
            description=f"{label} - to {destination.name}",
            transaction_date=today,
            bank_account_id=source.account.id,
        ),
        income=Transaction(
            user_id=user_id,
            type=INCOME,
            value=amount,
            description=f"{label} - from {source.account.name}",
            transaction_date=today,
            bank_account_id=destination.id,
        ),
    )
