"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from wallet_gateway.api.main import create_app
from wallet_gateway.api.dependencies import get_record_store
from wallet_gateway.domain.exceptions import RecordStoreError
from wallet_gateway.infrastructure.database.models import Base, BankAccountRow, CategoryRow
from wallet_gateway.infrastructure.database.repositories import SqlRecordStore


# Test database: one shared in-memory connection, usable from the TestClient thread
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "user_1"
OTHER_USER_ID = "user_2"


class FlakyStore:
    """Record store wrapper that fails chosen (operation, collection) calls"""

    def __init__(self, inner, fail_on=()):
        self.inner = inner
        self.fail_on = set(fail_on)
        self.calls = []

    def _check(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if (operation, collection) in self.fail_on:
            raise RecordStoreError(f"{operation} on {collection} failed")

    async def select(self, collection, filters=(), order=None, limit=None, offset=None):
        self._check("select", collection)
        return await self.inner.select(collection, filters, order, limit, offset)

    async def insert(self, collection, records):
        self._check("insert", collection)
        return await self.inner.insert(collection, records)

    async def update(self, collection, filters, patch):
        self._check("update", collection)
        return await self.inner.update(collection, filters, patch)

    async def delete(self, collection, filters):
        self._check("delete", collection)
        return await self.inner.delete(collection, filters)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db: Session) -> SqlRecordStore:
    return SqlRecordStore(db)


@pytest.fixture
def bank_account(db: Session) -> BankAccountRow:
    """Checking account with 1000.00 opening balance"""
    account = BankAccountRow(user_id=USER_ID, name="Checking", initial_balance=Decimal("1000.00"))
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def category(db: Session) -> CategoryRow:
    row = CategoryRow(user_id=USER_ID, name="Salary", type="receita")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def client(store: SqlRecordStore) -> TestClient:
    """Create FastAPI test client backed by the SQLite record store"""
    app = create_app()
    app.dependency_overrides[get_record_store] = lambda: store
    return TestClient(app)
