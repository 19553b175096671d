"""Bank account balances derived from transaction history"""

from decimal import Decimal
from typing import Dict, Iterable, List

from wallet_gateway.domain.models import EXPENSE, INCOME, AccountBalance, BankAccount, Transaction


def signed_value(transaction: Transaction) -> Decimal:
    if transaction.type == INCOME:
        return transaction.value
    if transaction.type == EXPENSE:
        return -transaction.value
    return Decimal(0)


def compute_balances(
    accounts: Iterable[BankAccount],
    transactions: Iterable[Transaction],
) -> List[AccountBalance]:
    """
    Current balance per account: initial balance + income - expenses.

    Transactions pointing at unknown accounts are ignored.
    """
    accounts = list(accounts)
    totals: Dict[str, Decimal] = {a.id: Decimal(0) for a in accounts}
    counts: Dict[str, int] = {a.id: 0 for a in accounts}

    for txn in transactions:
        if txn.bank_account_id not in totals:
            continue
        totals[txn.bank_account_id] += signed_value(txn)
        counts[txn.bank_account_id] += 1

    return [
        AccountBalance(
            account=account,
            current_balance=account.initial_balance + totals[account.id],
            transaction_count=counts[account.id],
        )
        for account in accounts
    ]
