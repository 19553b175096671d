"""Dependency injection for FastAPI endpoints"""

from typing import Iterator

from fastapi import Depends, Request

from wallet_gateway.config import settings
from wallet_gateway.infrastructure.clients.record_store import RecordStoreClient
from wallet_gateway.infrastructure.database.repositories import SqlRecordStore
from wallet_gateway.infrastructure.database.session import get_db
from wallet_gateway.infrastructure.store import RecordStore
from wallet_gateway.services.accounts import AccountService
from wallet_gateway.services.debts import DebtService
from wallet_gateway.services.goals import GoalService
from wallet_gateway.services.recurring import RecurringService
from wallet_gateway.services.transactions import TransactionService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def get_record_store(request: Request) -> Iterator[RecordStore]:
    """Provide the configured record store; the REST store acts with the caller's token"""
    if settings.record_store_backend == "sql":
        for db in get_db():
            yield SqlRecordStore(db)
    else:
        yield RecordStoreClient(access_token=_bearer_token(request))


def get_debt_service(store: RecordStore = Depends(get_record_store)) -> DebtService:
    return DebtService(store)


def get_recurring_service(store: RecordStore = Depends(get_record_store)) -> RecurringService:
    return RecurringService(store)


def get_account_service(store: RecordStore = Depends(get_record_store)) -> AccountService:
    return AccountService(store)


def get_transaction_service(store: RecordStore = Depends(get_record_store)) -> TransactionService:
    return TransactionService(store)


def get_goal_service(store: RecordStore = Depends(get_record_store)) -> GoalService:
    return GoalService(store)
