"""Unit tests for manual transactions and transfers"""

import pytest
from datetime import date
from decimal import Decimal
from wallet_gateway.domain.exceptions import ValidationError
from wallet_gateway.domain.models import AccountBalance, BankAccount, Transaction, TransactionDefinition
from wallet_gateway.domain.transactions import build_transaction, matches_search, plan_transfer

TODAY = date(2024, 3, 1)
CHECKING = BankAccount(id="checking", user_id="user_1", name="Checking")
SAVINGS = BankAccount(id="savings", user_id="user_1", name="Savings")


def balance(amount: str, account: BankAccount = CHECKING) -> AccountBalance:
    return AccountBalance(account=account, current_balance=Decimal(amount))


# ---------- Transfers ----------


def test_transfer_is_expense_plus_income():
    transfer = plan_transfer(balance("500.00"), SAVINGS, Decimal("200.00"), None, TODAY)

    assert transfer.expense.type == "expense"
    assert transfer.expense.bank_account_id == "checking"
    assert transfer.expense.description == "Transfer between accounts - to Savings"
    assert transfer.income.type == "income"
    assert transfer.income.bank_account_id == "savings"
    assert transfer.income.description == "Transfer between accounts - from Checking"
    for side in (transfer.expense, transfer.income):
        assert side.value == Decimal("200.00")
        assert side.transaction_date == TODAY
        assert side.user_id == "user_1"


def test_transfer_uses_given_label():
    transfer = plan_transfer(balance("500"), SAVINGS, Decimal("10"), "  Rainy day ", TODAY)
    assert transfer.expense.description == "Rainy day - to Savings"
    assert transfer.income.description == "Rainy day - from Checking"


def test_transfer_of_whole_balance_is_allowed():
    transfer = plan_transfer(balance("200.00"), SAVINGS, Decimal("200.00"), None, TODAY)
    assert transfer.expense.value == Decimal("200.00")


def test_transfer_above_balance_is_rejected():
    with pytest.raises(ValidationError, match="Insufficient balance"):
        plan_transfer(balance("199.99"), SAVINGS, Decimal("200.00"), None, TODAY)


def test_transfer_to_same_account_is_rejected():
    with pytest.raises(ValidationError):
        plan_transfer(balance("500"), CHECKING, Decimal("10"), None, TODAY)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
def test_non_positive_transfer_is_rejected(amount):
    with pytest.raises(ValidationError):
        plan_transfer(balance("500"), SAVINGS, amount, None, TODAY)


# ---------- Manual transactions ----------


def test_build_transaction_normalizes_fields():
    transaction = build_transaction(
        "user_1",
        TransactionDefinition(
            type="expense",
            value=Decimal("42.10"),
            transaction_date=TODAY,
            bank_account_id="checking",
            description="  Pharmacy ",
            category_id="",
        ),
    )
    assert transaction.user_id == "user_1"
    assert transaction.description == "Pharmacy"
    assert transaction.category_id is None
    assert transaction.id is None


@pytest.mark.parametrize(
    "overrides",
    [{"type": "transfer"}, {"value": Decimal("0")}, {"bank_account_id": ""}, {"transaction_date": None}],
)
def test_build_transaction_rejects_invalid_definition(overrides):
    fields = dict(type="income", value=Decimal("10"), transaction_date=TODAY, bank_account_id="checking")
    fields.update(overrides)
    with pytest.raises(ValidationError):
        build_transaction("user_1", TransactionDefinition(**fields))


def test_search_matches_description_or_category_case_insensitively():
    transaction = Transaction(
        user_id="user_1",
        type="expense",
        value=Decimal("30"),
        description="Weekly MARKET run",
        transaction_date=TODAY,
        bank_account_id="checking",
    )
    assert matches_search(transaction, "market")
    assert matches_search(transaction, "food", category_name="Food & drinks")
    assert not matches_search(transaction, "rent", category_name="Food & drinks")
    assert matches_search(transaction, "")
    assert matches_search(transaction, None)
