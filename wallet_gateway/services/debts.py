"""Debt bookkeeping against the record store"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from wallet_gateway.config import settings
from wallet_gateway.domain.debts import apply_payment
from wallet_gateway.domain.exceptions import (
    NotFoundError,
    PartialWriteError,
    RecordStoreError,
    ValidationError,
)
from wallet_gateway.domain.models import Debt, PaymentResult
from wallet_gateway.infrastructure.observability.logging import log_debt_payment
from wallet_gateway.infrastructure.observability.metrics import record_payment
from wallet_gateway.infrastructure.records import (
    DEBTS,
    TRANSACTIONS,
    debt_from_record,
    transaction_to_record,
)
from wallet_gateway.infrastructure.store import Order, RecordStore, eq
from wallet_gateway.services.accounts import AccountService
from wallet_gateway.utils.date_utils import utc_now


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text.strip() or None


def _validate_fields(name: str, monthly_interest_rate: Optional[Decimal]) -> None:
    if not (name or "").strip():
        raise ValidationError("Debt name is required")
    if monthly_interest_rate is not None and monthly_interest_rate < 0:
        raise ValidationError("Interest rate cannot be negative")


class DebtService:
    """CRUD for debts plus payment application"""

    def __init__(self, store: RecordStore, atomic_payments: bool | None = None):
        self.store = store
        self.accounts = AccountService(store)
        self.atomic_payments = settings.atomic_debt_payments if atomic_payments is None else atomic_payments

    async def list_debts(self, user_id: str) -> List[Debt]:
        rows = await self.store.select(DEBTS, [eq("user_id", user_id)], Order("created_at", ascending=False))
        return [debt_from_record(row) for row in rows]

    async def get_debt(self, user_id: str, debt_id: str) -> Debt:
        rows = await self.store.select(DEBTS, [eq("id", debt_id), eq("user_id", user_id)], limit=1)
        if not rows:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt_from_record(rows[0])

    async def create_debt(
        self,
        user_id: str,
        name: str,
        original_amount: Decimal,
        monthly_interest_rate: Optional[Decimal] = None,
        due_date: Optional[date] = None,
        creditor: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Debt:
        """New debts start with nothing paid: current amount = original amount"""
        _validate_fields(name, monthly_interest_rate)
        if original_amount is None or original_amount < 0:
            raise ValidationError("Original amount must be zero or more")

        rows = await self.store.insert(
            DEBTS,
            [
                {
                    "user_id": user_id,
                    "name": name.strip(),
                    "original_amount": original_amount,
                    "current_amount": original_amount,
                    "monthly_interest_rate": monthly_interest_rate,
                    "due_date": due_date,
                    "creditor": _clean(creditor),
                    "description": _clean(description),
                }
            ],
        )
        return debt_from_record(rows[0])

    async def update_debt(
        self,
        user_id: str,
        debt_id: str,
        name: str,
        monthly_interest_rate: Optional[Decimal] = None,
        due_date: Optional[date] = None,
        creditor: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Debt:
        """Edit descriptive fields; amounts are only ever changed by payments"""
        _validate_fields(name, monthly_interest_rate)
        await self.get_debt(user_id, debt_id)

        rows = await self.store.update(
            DEBTS,
            [eq("id", debt_id), eq("user_id", user_id)],
            {
                "name": name.strip(),
                "monthly_interest_rate": monthly_interest_rate,
                "due_date": due_date,
                "creditor": _clean(creditor),
                "description": _clean(description),
            },
        )
        if not rows:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt_from_record(rows[0])

    async def delete_debt(self, user_id: str, debt_id: str) -> None:
        await self.get_debt(user_id, debt_id)
        await self.store.delete(DEBTS, [eq("id", debt_id), eq("user_id", user_id)])

    async def pay_debt(
        self,
        user_id: str,
        debt_id: str,
        amount: Decimal,
        bank_account_id: Optional[str],
        description: Optional[str] = None,
        now: Optional[datetime] = None,
        request_id: Optional[str] = None,
    ) -> PaymentResult:
        """
        Record a payment: insert the expense, then reduce the debt.

        The two writes are independent. If the debt update fails after the
        expense was stored, PartialWriteError is raised and the expense stays,
        unless atomic payments are enabled, in which case the expense is
        deleted again first.

        Raises:
            ValidationError: amount/account rejected; nothing written
            NotFoundError: unknown debt or bank account; nothing written
            RecordStoreError: a store call failed
        """
        now = now or utc_now()
        debt = await self.get_debt(user_id, debt_id)

        try:
            result = apply_payment(debt, amount, bank_account_id, now, description)
            await self.accounts.get_bank_account(user_id, bank_account_id)
        except (ValidationError, NotFoundError):
            record_payment("rejected")
            log_debt_payment(user_id, debt_id, amount, None, "rejected", request_id)
            raise

        inserted = await self.store.insert(TRANSACTIONS, [transaction_to_record(result.transaction)])
        if inserted:
            result.transaction.id = str(inserted[0]["id"])

        try:
            await self.store.update(
                DEBTS,
                [eq("id", debt.id), eq("user_id", user_id)],
                {
                    "current_amount": result.new_current_amount,
                    "last_payment_date": result.last_payment_date,
                },
            )
        except RecordStoreError as e:
            if self.atomic_payments and result.transaction.id:
                await self._compensate(user_id, debt_id, amount, result, request_id, e)
                raise RecordStoreError(f"Debt {debt_id} update failed; payment transaction removed") from e

            record_payment("partial")
            log_debt_payment(user_id, debt_id, amount, None, "partial", request_id)
            logging.error(
                f"Debt update failed after payment transaction was stored: {e}",
                extra={"request_id": request_id, "debt_id": debt_id, "transaction_id": result.transaction.id},
            )
            raise PartialWriteError(
                f"Payment transaction recorded but debt {debt_id} was not updated",
                completed_steps=["insert_transaction"],
            ) from e

        record_payment("applied", float(amount))
        log_debt_payment(user_id, debt_id, amount, result.new_current_amount, "applied", request_id)
        return result

    async def _compensate(
        self,
        user_id: str,
        debt_id: str,
        amount: Decimal,
        result: PaymentResult,
        request_id: Optional[str],
        cause: RecordStoreError,
    ) -> None:
        try:
            await self.store.delete(
                TRANSACTIONS,
                [eq("id", result.transaction.id), eq("user_id", user_id)],
            )
        except RecordStoreError as e:
            record_payment("partial")
            log_debt_payment(user_id, debt_id, amount, None, "partial", request_id)
            raise PartialWriteError(
                f"Debt {debt_id} update failed ({cause}) and the payment transaction could not be removed",
                completed_steps=["insert_transaction"],
            ) from e

        record_payment("compensated")
        log_debt_payment(user_id, debt_id, amount, None, "compensated", request_id)
