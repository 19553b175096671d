"""Manual transactions and transfers against the record store"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from wallet_gateway.domain.exceptions import NotFoundError, ValidationError
from wallet_gateway.domain.models import Transaction, TransactionDefinition, Transfer
from wallet_gateway.domain.transactions import build_transaction, matches_search, plan_transfer
from wallet_gateway.infrastructure.observability.logging import log_transfer
from wallet_gateway.infrastructure.observability.metrics import record_transfer
from wallet_gateway.infrastructure.records import (
    TRANSACTIONS,
    to_store_type,
    transaction_from_record,
    transaction_to_record,
)
from wallet_gateway.infrastructure.store import Order, RecordStore, eq, gte, lte, select_all
from wallet_gateway.services.accounts import AccountService
from wallet_gateway.utils.date_utils import month_bounds, utc_today


class TransactionService:
    """Listing, manual CRUD and account-to-account transfers"""

    def __init__(self, store: RecordStore, accounts: Optional[AccountService] = None):
        self.store = store
        self.accounts = accounts or AccountService(store)

    def _scope(self, user_id: str, transaction_id: str):
        return [eq("id", transaction_id), eq("user_id", user_id)]

    async def list_transactions(
        self,
        user_id: str,
        month: Optional[str] = None,
        type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Transaction]:
        """
        Transactions newest first, optionally narrowed to a "YYYY-MM" month, a
        type, and a search term matched against description or category name.
        """
        filters = [eq("user_id", user_id)]
        if month:
            try:
                first, last = month_bounds(month)
            except ValueError:
                raise ValidationError(f"Month must look like YYYY-MM, got {month!r}") from None
            filters += [gte("transaction_date", first), lte("transaction_date", last)]
        if type:
            filters.append(eq("type", to_store_type(type)))

        rows = await select_all(self.store, TRANSACTIONS, filters, Order("transaction_date", ascending=False))
        transactions = [transaction_from_record(row) for row in rows]
        if not search:
            return transactions

        names = await self.accounts.category_names(user_id)
        return [t for t in transactions if matches_search(t, search, names.get(t.category_id))]

    async def get_transaction(self, user_id: str, transaction_id: str) -> Transaction:
        rows = await self.store.select(TRANSACTIONS, self._scope(user_id, transaction_id), limit=1)
        if not rows:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction_from_record(rows[0])

    async def create_transaction(self, user_id: str, definition: TransactionDefinition) -> Transaction:
        transaction = build_transaction(user_id, definition)
        await self.accounts.get_bank_account(user_id, transaction.bank_account_id)
        rows = await self.store.insert(TRANSACTIONS, [transaction_to_record(transaction)])
        return transaction_from_record(rows[0])

    async def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        definition: TransactionDefinition,
    ) -> Transaction:
        transaction = build_transaction(user_id, definition)
        await self.get_transaction(user_id, transaction_id)
        await self.accounts.get_bank_account(user_id, transaction.bank_account_id)

        rows = await self.store.update(
            TRANSACTIONS,
            self._scope(user_id, transaction_id),
            transaction_to_record(transaction),
        )
        if not rows:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction_from_record(rows[0])

    async def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        await self.get_transaction(user_id, transaction_id)
        await self.store.delete(TRANSACTIONS, self._scope(user_id, transaction_id))

    async def transfer(
        self,
        user_id: str,
        from_account_id: str,
        to_account_id: str,
        amount: Decimal,
        description: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Transfer:
        """
        Move money between two accounts.

        Both rows go to the store in a single insert, so either both are
        recorded or neither is.

        Raises:
            ValidationError: bad amount, same account twice, insufficient balance
            NotFoundError: either account unknown
        """
        today = today or utc_today()
        try:
            source = await self.accounts.get_balance(user_id, from_account_id)
            destination = await self.accounts.get_bank_account(user_id, to_account_id)
            transfer = plan_transfer(source, destination, amount, description, today)
        except (ValidationError, NotFoundError) as e:
            record_transfer("rejected")
            logging.warning(f"Transfer rejected: {e}", extra={"user_id": user_id})
            raise

        rows = await self.store.insert(
            TRANSACTIONS,
            [transaction_to_record(transfer.expense), transaction_to_record(transfer.income)],
        )
        if len(rows) == 2:
            transfer = Transfer(
                expense=transaction_from_record(rows[0]),
                income=transaction_from_record(rows[1]),
            )

        record_transfer("applied", float(amount))
        log_transfer(user_id, from_account_id, to_account_id, amount)
        return transfer
