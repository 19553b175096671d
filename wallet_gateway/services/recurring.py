"""Recurring transaction lifecycle against the record store"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from wallet_gateway.domain import recurring
from wallet_gateway.domain.exceptions import NotFoundError, PartialWriteError, RecordStoreError
from wallet_gateway.domain.models import RecurringDefinition, RecurringTransaction, Transaction
from wallet_gateway.infrastructure.observability.logging import log_recurring_fired
from wallet_gateway.infrastructure.observability.metrics import record_firing
from wallet_gateway.infrastructure.records import (
    RECURRING_TRANSACTIONS,
    TRANSACTIONS,
    recurring_from_record,
    recurring_to_record,
    transaction_from_record,
    transaction_to_record,
)
from wallet_gateway.infrastructure.store import Order, RecordStore, eq
from wallet_gateway.utils.date_utils import utc_today


@dataclass
class FiredSeries:
    series: RecurringTransaction
    transaction: Optional[Transaction]


class RecurringService:
    """Create, fire, edit, pause and reactivate recurring transactions"""

    def __init__(self, store: RecordStore):
        self.store = store

    def _scope(self, user_id: str, series_id: str):
        return [eq("id", series_id), eq("user_id", user_id)]

    async def list_series(self, user_id: str) -> List[RecurringTransaction]:
        rows = await self.store.select(
            RECURRING_TRANSACTIONS,
            [eq("user_id", user_id)],
            Order("next_occurrence_date"),
        )
        return [recurring_from_record(row) for row in rows]

    async def get_series(self, user_id: str, series_id: str) -> RecurringTransaction:
        rows = await self.store.select(RECURRING_TRANSACTIONS, self._scope(user_id, series_id), limit=1)
        if not rows:
            raise NotFoundError(f"Recurring transaction {series_id} not found")
        return recurring_from_record(rows[0])

    async def _insert_transaction(self, transaction: Transaction) -> Transaction:
        rows = await self.store.insert(TRANSACTIONS, [transaction_to_record(transaction)])
        return transaction_from_record(rows[0]) if rows else transaction

    async def _save(self, series: RecurringTransaction, patch: dict) -> RecurringTransaction:
        rows = await self.store.update(RECURRING_TRANSACTIONS, self._scope(series.user_id, series.id), patch)
        if not rows:
            raise NotFoundError(f"Recurring transaction {series.id} not found")
        return recurring_from_record(rows[0])

    async def create_series(
        self,
        user_id: str,
        definition: RecurringDefinition,
        today: Optional[date] = None,
    ) -> FiredSeries:
        """
        Store a new series, firing its first occurrence when already due.

        The first transaction is inserted before the series itself; if the
        series insert then fails, PartialWriteError reports the orphaned
        transaction.
        """
        today = today or utc_today()
        firing = recurring.plan_creation(user_id, definition, today)

        transaction = None
        if firing.transaction is not None:
            transaction = await self._insert_transaction(firing.transaction)

        series = RecurringTransaction(
            id="",
            user_id=user_id,
            type=definition.type,
            value=definition.value,
            description=definition.description.strip(),
            frequency=definition.frequency,
            start_date=definition.start_date,
            end_date=definition.end_date,
            next_occurrence_date=firing.next_occurrence_date,
            bank_account_id=definition.bank_account_id,
            category_id=definition.category_id,
        )

        try:
            rows = await self.store.insert(RECURRING_TRANSACTIONS, [recurring_to_record(series)])
        except RecordStoreError as e:
            if transaction is None:
                raise
            logging.error(
                f"Recurring transaction insert failed after first occurrence was stored: {e}",
                extra={"user_id": user_id, "transaction_id": transaction.id},
            )
            raise PartialWriteError(
                "First occurrence recorded but the recurring transaction was not saved",
                completed_steps=["insert_first_transaction"],
            ) from e

        stored = recurring_from_record(rows[0])
        if transaction is not None:
            record_firing("first_occurrence")
            log_recurring_fired(
                user_id, stored.id, "first_occurrence", transaction.transaction_date, stored.next_occurrence_date
            )
        return FiredSeries(series=stored, transaction=transaction)

    async def update_series(
        self,
        user_id: str,
        series_id: str,
        definition: RecurringDefinition,
        today: Optional[date] = None,
    ) -> RecurringTransaction:
        today = today or utc_today()
        current = await self.get_series(user_id, series_id)
        edited = recurring.plan_edit(current, definition, today)
        return await self._save(current, recurring_to_record(edited))

    async def execute_now(
        self,
        user_id: str,
        series_id: str,
        today: Optional[date] = None,
    ) -> FiredSeries:
        """Fire a series by hand: insert today's transaction, then advance the schedule"""
        today = today or utc_today()
        series = await self.get_series(user_id, series_id)
        firing = recurring.plan_execution(series, today)

        transaction = await self._insert_transaction(firing.transaction)
        try:
            stored = await self._save(series, {"next_occurrence_date": firing.next_occurrence_date})
        except (RecordStoreError, NotFoundError) as e:
            logging.error(
                f"Schedule not advanced after manual execution: {e}",
                extra={"user_id": user_id, "series_id": series_id, "transaction_id": transaction.id},
            )
            raise PartialWriteError(
                f"Transaction recorded but recurring transaction {series_id} was not advanced",
                completed_steps=["insert_transaction"],
            ) from e

        record_firing("manual")
        log_recurring_fired(user_id, series_id, "manual", today, stored.next_occurrence_date)
        return FiredSeries(series=stored, transaction=transaction)

    async def pause(self, user_id: str, series_id: str, today: Optional[date] = None) -> RecurringTransaction:
        today = today or utc_today()
        series = await self.get_series(user_id, series_id)
        paused = recurring.pause(series, today)
        return await self._save(series, {"end_date": paused.end_date})

    async def reactivate(self, user_id: str, series_id: str, today: Optional[date] = None) -> RecurringTransaction:
        today = today or utc_today()
        series = await self.get_series(user_id, series_id)
        resumed = recurring.reactivate(series, today)
        return await self._save(
            series,
            {"end_date": None, "next_occurrence_date": resumed.next_occurrence_date},
        )

    async def delete_series(self, user_id: str, series_id: str) -> None:
        await self.get_series(user_id, series_id)
        await self.store.delete(RECURRING_TRANSACTIONS, self._scope(user_id, series_id))
