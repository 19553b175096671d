"""Integration tests for the SQLAlchemy record store"""

import pytest
from datetime import date
from decimal import Decimal
from wallet_gateway.domain.exceptions import RecordStoreError
from wallet_gateway.infrastructure.store import Filter, Order, eq, lte, select_all


def series_record(description: str, next_date: date, user_id: str = "user_1", **extra) -> dict:
    record = {
        "user_id": user_id,
        "type": "despesa",
        "value": Decimal("10.00"),
        "description": description,
        "frequency": "monthly",
        "start_date": date(2024, 1, 1),
        "next_occurrence_date": next_date,
        "bank_account_id": "acc_1",
    }
    record.update(extra)
    return record


async def test_insert_assigns_id_and_returns_row(store):
    [row] = await store.insert("debts", [{
        "user_id": "user_1",
        "name": "Loan",
        "original_amount": Decimal("100.00"),
        "current_amount": Decimal("100.00"),
    }])

    assert row["id"]
    assert row["name"] == "Loan"
    assert row["current_amount"] == Decimal("100.00")
    assert row["created_at"] is not None


async def test_select_filters_orders_and_limits(store):
    await store.insert("recurring_transactions", [
        series_record("Rent", date(2024, 4, 1)),
        series_record("Phone", date(2024, 3, 20)),
        series_record("Gym", date(2024, 5, 1)),
        series_record("Someone else's", date(2024, 3, 1), user_id="user_2"),
    ])

    rows = await store.select(
        "recurring_transactions",
        [eq("user_id", "user_1")],
        Order("next_occurrence_date"),
    )
    assert [r["description"] for r in rows] == ["Phone", "Rent", "Gym"]

    due = await store.select(
        "recurring_transactions",
        [eq("user_id", "user_1"), lte("next_occurrence_date", date(2024, 4, 1))],
        Order("next_occurrence_date", ascending=False),
        limit=1,
    )
    assert [r["description"] for r in due] == ["Rent"]

    open_ended = await store.select("recurring_transactions", [Filter("end_date", "is", None)])
    assert len(open_ended) == 4


async def test_update_patches_only_matching_rows(store):
    rows = await store.insert("recurring_transactions", [
        series_record("Rent", date(2024, 4, 1)),
        series_record("Phone", date(2024, 3, 20)),
    ])

    updated = await store.update(
        "recurring_transactions",
        [eq("id", rows[0]["id"])],
        {"end_date": date(2024, 3, 15)},
    )

    assert len(updated) == 1
    assert updated[0]["end_date"] == date(2024, 3, 15)
    [other] = await store.select("recurring_transactions", [eq("id", rows[1]["id"])])
    assert other["end_date"] is None


async def test_delete_removes_matching_rows(store):
    rows = await store.insert("recurring_transactions", [series_record("Rent", date(2024, 4, 1))])
    await store.delete("recurring_transactions", [eq("id", rows[0]["id"])])
    assert await store.select("recurring_transactions") == []


async def test_unknown_collection_or_column_raises(store):
    with pytest.raises(RecordStoreError):
        await store.select("investments")
    with pytest.raises(RecordStoreError):
        await store.select("debts", [eq("owner", "user_1")])
    with pytest.raises(RecordStoreError):
        await store.update("debts", [eq("id", "x")], {"balance": 1})
    with pytest.raises(RecordStoreError):
        await store.insert("debts", [{"unknown_field": 1}])


async def test_constraint_violation_raises_and_rolls_back(store):
    with pytest.raises(RecordStoreError):
        await store.insert("debts", [{"user_id": "user_1", "name": "No amounts"}])

    # Session is usable again after the rollback
    assert await store.select("debts") == []


async def test_select_pages_with_limit_and_offset(store):
    await store.insert("recurring_transactions", [
        series_record(name, date(2024, 3, day)) for day, name in enumerate(["A", "B", "C", "D", "E"], start=1)
    ])
    order = Order("next_occurrence_date")

    second_page = await store.select("recurring_transactions", order=order, limit=2, offset=2)
    last_page = await store.select("recurring_transactions", order=order, limit=2, offset=4)

    assert [r["description"] for r in second_page] == ["C", "D"]
    assert [r["description"] for r in last_page] == ["E"]


async def test_select_all_reads_past_the_page_size(store):
    await store.insert("recurring_transactions", [
        series_record(f"Bill {n}", date(2024, 3, n)) for n in range(1, 8)
    ])

    rows = await select_all(
        store, "recurring_transactions", [eq("user_id", "user_1")], Order("next_occurrence_date"), page_size=3
    )

    assert [r["description"] for r in rows] == [f"Bill {n}" for n in range(1, 8)]
