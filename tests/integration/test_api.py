"""Integration tests for API endpoints"""

import pytest
from datetime import timedelta
from decimal import Decimal
from fastapi.testclient import TestClient
from wallet_gateway.infrastructure.database.models import BankAccountRow
from wallet_gateway.utils.date_utils import utc_today

USER_ID = "user_1"


@pytest.fixture
def debt(client: TestClient) -> dict:
    """A 5000.00 interest-free loan"""
    response = client.post(
        "/v1/debts",
        json={"user_id": USER_ID, "name": "Car loan", "original_amount": "5000.00", "creditor": "Bank"},
    )
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "wallet_debt_payments_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


# ---------- Debts ----------


def test_create_and_list_debts(client: TestClient, debt: dict):
    assert debt["current_amount"] == 5000.0
    assert debt["amount_owed"] == 5000.0
    assert debt["progress_percent"] == 0.0
    assert debt["settled"] is False

    response = client.get("/v1/debts", params={"user_id": USER_ID})
    assert response.status_code == 200
    data = response.json()
    assert [d["id"] for d in data["debts"]] == [debt["id"]]
    assert data["summary"]["debt_count"] == 1
    assert data["summary"]["total_original"] == 5000.0

    other = client.get("/v1/debts", params={"user_id": "user_2"}).json()
    assert other["debts"] == []


def test_create_debt_rejects_negative_amount(client: TestClient):
    response = client.post(
        "/v1/debts",
        json={"user_id": USER_ID, "name": "Loan", "original_amount": "-1"},
    )
    assert response.status_code == 422


def test_debt_with_accrued_interest(client: TestClient):
    """Due 60 days ago at 10% a month: 1000 × 1.1² = 1210"""
    due_date = utc_today() - timedelta(days=60)
    response = client.post(
        "/v1/debts",
        json={
            "user_id": USER_ID,
            "name": "Credit card",
            "original_amount": "1000.00",
            "monthly_interest_rate": "10",
            "due_date": due_date.isoformat(),
        },
    )

    data = response.json()
    assert data["current_amount"] == 1000.0
    assert data["amount_owed"] == 1210.0
    assert data["days_until_due"] == -60


def test_get_update_and_delete_debt(client: TestClient, debt: dict):
    url = f"/v1/debts/{debt['id']}"

    response = client.get(url, params={"user_id": USER_ID})
    assert response.status_code == 200
    assert response.json()["name"] == "Car loan"

    response = client.patch(url, json={"user_id": USER_ID, "name": "Car loan (refinanced)", "monthly_interest_rate": "1.2"})
    assert response.status_code == 200
    assert response.json()["name"] == "Car loan (refinanced)"
    assert response.json()["monthly_interest_rate"] == 1.2
    assert response.json()["current_amount"] == 5000.0

    assert client.delete(url, params={"user_id": USER_ID}).status_code == 204
    assert client.get(url, params={"user_id": USER_ID}).status_code == 404


def test_get_debt_of_another_user_is_not_found(client: TestClient, debt: dict):
    response = client.get(f"/v1/debts/{debt['id']}", params={"user_id": "user_2"})
    assert response.status_code == 404


def test_pay_debt(client: TestClient, debt: dict, bank_account):
    response = client.post(
        f"/v1/debts/{debt['id']}/payments",
        json={"user_id": USER_ID, "amount": "2000.00", "bank_account_id": bank_account.id},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["amount_before"] == 5000.0
    assert data["new_current_amount"] == 3000.0
    assert data["transaction"]["type"] == "expense"
    assert data["transaction"]["value"] == 2000.0
    assert data["transaction"]["description"] == "Payment of Car loan"
    assert data["transaction"]["transaction_date"] == utc_today().isoformat()

    updated = client.get(f"/v1/debts/{debt['id']}", params={"user_id": USER_ID}).json()
    assert updated["current_amount"] == 3000.0
    assert updated["progress_percent"] == 40.0
    assert updated["last_payment_date"] is not None


def test_pay_off_debt_then_reject_further_payments(client: TestClient, debt: dict, bank_account):
    url = f"/v1/debts/{debt['id']}/payments"
    body = {"user_id": USER_ID, "amount": "5000.00", "bank_account_id": bank_account.id}

    assert client.post(url, json=body).status_code == 201
    settled = client.get(f"/v1/debts/{debt['id']}", params={"user_id": USER_ID}).json()
    assert settled["settled"] is True
    assert settled["progress_percent"] == 100.0

    response = client.post(url, json={**body, "amount": "1.00"})
    assert response.status_code == 422


@pytest.mark.parametrize("amount", ["0", "-10", "5000.01"])
def test_pay_debt_invalid_amount(client: TestClient, debt: dict, bank_account, amount: str):
    response = client.post(
        f"/v1/debts/{debt['id']}/payments",
        json={"user_id": USER_ID, "amount": amount, "bank_account_id": bank_account.id},
    )
    assert response.status_code == 422

    accounts = client.get("/v1/bank-accounts", params={"user_id": USER_ID}).json()["accounts"]
    assert accounts[0]["transaction_count"] == 0


def test_pay_debt_requires_bank_account(client: TestClient, debt: dict):
    url = f"/v1/debts/{debt['id']}/payments"
    assert client.post(url, json={"user_id": USER_ID, "amount": "10"}).status_code == 422
    assert client.post(url, json={"user_id": USER_ID, "amount": "10", "bank_account_id": "nope"}).status_code == 404


def test_pay_unknown_debt(client: TestClient, bank_account):
    response = client.post(
        "/v1/debts/missing/payments",
        json={"user_id": USER_ID, "amount": "10", "bank_account_id": bank_account.id},
    )
    assert response.status_code == 404


# ---------- Recurring transactions ----------


def recurring_body(bank_account_id: str, **overrides) -> dict:
    body = {
        "user_id": USER_ID,
        "type": "expense",
        "value": "49.90",
        "description": "Gym membership",
        "frequency": "monthly",
        "start_date": utc_today().isoformat(),
        "bank_account_id": bank_account_id,
    }
    body.update(overrides)
    return body


def test_create_recurring_due_today_fires(client: TestClient, bank_account):
    response = client.post("/v1/recurring-transactions", json=recurring_body(bank_account.id))

    assert response.status_code == 201
    data = response.json()
    assert data["transaction"]["description"] == "Gym membership (first automatic occurrence)"
    assert data["transaction"]["transaction_date"] == utc_today().isoformat()
    assert data["recurring_transaction"]["active"] is True
    assert data["recurring_transaction"]["next_occurrence_date"] > utc_today().isoformat()


def test_create_recurring_in_future_does_not_fire(client: TestClient, bank_account):
    start = utc_today() + timedelta(days=10)
    response = client.post(
        "/v1/recurring-transactions",
        json=recurring_body(bank_account.id, start_date=start.isoformat()),
    )

    data = response.json()
    assert data["transaction"] is None
    assert data["recurring_transaction"]["next_occurrence_date"] == start.isoformat()
    assert data["recurring_transaction"]["days_until_next"] == 10


def test_create_recurring_rejects_bad_input(client: TestClient, bank_account):
    assert client.post("/v1/recurring-transactions", json=recurring_body(bank_account.id, value="0")).status_code == 422
    assert client.post("/v1/recurring-transactions", json=recurring_body(bank_account.id, type="transfer")).status_code == 422


def test_recurring_lifecycle(client: TestClient, bank_account):
    start = utc_today() + timedelta(days=3)
    created = client.post(
        "/v1/recurring-transactions",
        json=recurring_body(bank_account.id, frequency="weekly", start_date=start.isoformat()),
    ).json()
    series_id = created["recurring_transaction"]["id"]
    base = f"/v1/recurring-transactions/{series_id}"

    executed = client.post(f"{base}/execute", json={"user_id": USER_ID}).json()
    assert executed["transaction"]["description"] == "Gym membership (executed manually)"
    assert executed["recurring_transaction"]["next_occurrence_date"] == (start + timedelta(days=7)).isoformat()

    paused = client.post(f"{base}/pause", json={"user_id": USER_ID}).json()
    assert paused["end_date"] == utc_today().isoformat()

    resumed = client.post(f"{base}/reactivate", json={"user_id": USER_ID}).json()
    assert resumed["end_date"] is None
    assert resumed["next_occurrence_date"] == utc_today().isoformat()

    edited = client.put(base, json=recurring_body(bank_account.id, frequency="weekly", value="59.90", start_date=start.isoformat()))
    assert edited.status_code == 200
    assert edited.json()["value"] == 59.9
    assert edited.json()["next_occurrence_date"] == (utc_today() + timedelta(days=1)).isoformat()

    listing = client.get("/v1/recurring-transactions", params={"user_id": USER_ID}).json()
    assert [s["id"] for s in listing["active"]] == [series_id]
    assert listing["inactive"] == []

    assert client.delete(base, params={"user_id": USER_ID}).status_code == 204
    assert client.post(f"{base}/execute", json={"user_id": USER_ID}).status_code == 404


def test_recurring_with_past_end_date_is_inactive(client: TestClient, bank_account):
    start = utc_today() - timedelta(days=30)
    end = utc_today() - timedelta(days=1)
    client.post(
        "/v1/recurring-transactions",
        json=recurring_body(bank_account.id, start_date=start.isoformat(), end_date=end.isoformat()),
    )

    listing = client.get("/v1/recurring-transactions", params={"user_id": USER_ID}).json()
    assert listing["active"] == []
    [series] = listing["inactive"]
    assert series["overdue"] is False


# ---------- Lookups ----------


def test_bank_account_balances(client: TestClient, debt: dict, bank_account):
    client.post(
        f"/v1/debts/{debt['id']}/payments",
        json={"user_id": USER_ID, "amount": "250.00", "bank_account_id": bank_account.id},
    )
    client.post(
        "/v1/recurring-transactions",
        json=recurring_body(bank_account.id, type="income", value="3000.00", description="Salary"),
    )

    response = client.get("/v1/bank-accounts", params={"user_id": USER_ID})
    assert response.status_code == 200
    [account] = response.json()["accounts"]
    assert account["name"] == "Checking"
    assert account["initial_balance"] == 1000.0
    assert account["current_balance"] == 3750.0
    assert account["transaction_count"] == 2


def test_categories_filtered_by_type(client: TestClient, category):
    income = client.get("/v1/categories", params={"user_id": USER_ID, "type": "income"}).json()
    assert [c["name"] for c in income["categories"]] == ["Salary"]

    expense = client.get("/v1/categories", params={"user_id": USER_ID, "type": "expense"}).json()
    assert expense["categories"] == []


def test_category_type_must_be_known(client: TestClient):
    response = client.get("/v1/categories", params={"user_id": USER_ID, "type": "receita"})
    assert response.status_code == 422


# ---------- Transactions ----------


def transaction_body(account_id: str, **overrides) -> dict:
    body = {
        "user_id": USER_ID,
        "type": "expense",
        "value": "120.00",
        "transaction_date": utc_today().isoformat(),
        "bank_account_id": account_id,
        "description": "Electricity",
    }
    body.update(overrides)
    return body


def test_transaction_lifecycle(client: TestClient, bank_account):
    response = client.post("/v1/transactions", json=transaction_body(bank_account.id))
    assert response.status_code == 201
    created = response.json()
    assert created["type"] == "expense"
    assert created["value"] == 120.0
    url = f"/v1/transactions/{created['id']}"

    assert client.get(url, params={"user_id": USER_ID}).json()["description"] == "Electricity"

    response = client.put(url, json=transaction_body(bank_account.id, value="130.00", description="Power bill"))
    assert response.status_code == 200
    assert response.json()["value"] == 130.0
    assert response.json()["description"] == "Power bill"

    assert client.delete(url, params={"user_id": USER_ID}).status_code == 204
    assert client.get(url, params={"user_id": USER_ID}).status_code == 404


def test_list_transactions_with_totals(client: TestClient, bank_account):
    client.post("/v1/transactions", json=transaction_body(bank_account.id))
    client.post("/v1/transactions", json=transaction_body(bank_account.id, type="income", value="500.00", description="Refund"))

    month = utc_today().strftime("%Y-%m")
    data = client.get("/v1/transactions", params={"user_id": USER_ID, "month": month}).json()
    assert data["month"] == month
    assert len(data["transactions"]) == 2
    assert data["total_income"] == 500.0
    assert data["total_expense"] == 120.0

    found = client.get("/v1/transactions", params={"user_id": USER_ID, "search": "REFUND"}).json()
    assert [t["description"] for t in found["transactions"]] == ["Refund"]

    assert client.get("/v1/transactions", params={"user_id": USER_ID, "month": "2024-13"}).status_code == 422


def test_create_transaction_validation(client: TestClient, bank_account):
    assert client.post("/v1/transactions", json=transaction_body(bank_account.id, value="0")).status_code == 422
    assert client.post("/v1/transactions", json=transaction_body(bank_account.id, type="despesa")).status_code == 422
    assert client.post("/v1/transactions", json=transaction_body("missing")).status_code == 404


# ---------- Transfers ----------


@pytest.fixture
def savings_account(db):
    row = BankAccountRow(user_id=USER_ID, name="Savings", initial_balance=Decimal("0"))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_transfer_between_accounts(client: TestClient, bank_account, savings_account):
    response = client.post(
        "/v1/bank-accounts/transfers",
        json={
            "user_id": USER_ID,
            "from_account_id": bank_account.id,
            "to_account_id": savings_account.id,
            "amount": "400.00",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["expense"]["bank_account_id"] == bank_account.id
    assert data["expense"]["description"] == "Transfer between accounts - to Savings"
    assert data["income"]["bank_account_id"] == savings_account.id
    assert data["income"]["type"] == "income"

    accounts = client.get("/v1/bank-accounts", params={"user_id": USER_ID}).json()["accounts"]
    assert {a["name"]: a["current_balance"] for a in accounts} == {"Checking": 600.0, "Savings": 400.0}


def test_transfer_rejections(client: TestClient, bank_account, savings_account):
    def transfer(**overrides):
        body = {
            "user_id": USER_ID,
            "from_account_id": bank_account.id,
            "to_account_id": savings_account.id,
            "amount": "100.00",
        }
        body.update(overrides)
        return client.post("/v1/bank-accounts/transfers", json=body)

    insufficient = transfer(amount="1000.01")
    assert insufficient.status_code == 422
    assert "Insufficient balance" in insufficient.json()["detail"]
    assert transfer(to_account_id=bank_account.id).status_code == 422
    assert transfer(amount="-5").status_code == 422
    assert transfer(to_account_id="missing").status_code == 404

    assert client.get("/v1/transactions", params={"user_id": USER_ID}).json()["transactions"] == []


# ---------- Goals ----------


def goal_body(**overrides) -> dict:
    today = utc_today()
    body = {
        "user_id": USER_ID,
        "type": "income",
        "target_value": "1000.00",
        "start_period": (today - timedelta(days=10)).isoformat(),
        "end_period": (today + timedelta(days=20)).isoformat(),
    }
    body.update(overrides)
    return body


@pytest.fixture
def goal(client: TestClient) -> dict:
    response = client.post("/v1/goals", json=goal_body())
    assert response.status_code == 201
    return response.json()


def test_create_and_list_goals(client: TestClient, goal: dict):
    assert goal["current_value"] == 0.0
    assert goal["progress_percent"] == 0.0
    assert goal["remaining_days"] == 20
    assert goal["completed"] is False

    client.post("/v1/goals", json=goal_body(type="expense", target_value="300.00"))

    data = client.get("/v1/goals", params={"user_id": USER_ID}).json()
    assert [g["id"] for g in data["income"]] == [goal["id"]]
    assert [g["target_value"] for g in data["expense"]] == [300.0]


def test_goal_validation(client: TestClient):
    assert client.post("/v1/goals", json=goal_body(target_value="0")).status_code == 422
    today = utc_today()
    backwards = goal_body(start_period=today.isoformat(), end_period=(today - timedelta(days=1)).isoformat())
    assert client.post("/v1/goals", json=backwards).status_code == 422


def test_goal_progress(client: TestClient, goal: dict):
    url = f"/v1/goals/{goal['id']}/progress"
    today = utc_today().isoformat()

    first = client.post(url, json={"user_id": USER_ID, "value": "600.00", "progress_date": today})
    assert first.status_code == 201
    assert first.json()["merged"] is False
    assert first.json()["contribution"]["description"] == "Goal progress: Income"
    assert first.json()["goal"]["progress_percent"] == 60.0

    second = client.post(url, json={"user_id": USER_ID, "value": "500.00", "progress_date": today, "description": "Bonus"})
    assert second.status_code == 201
    data = second.json()
    assert data["merged"] is True
    assert data["contribution"]["value"] == 1100.0
    assert data["contribution"]["description"] == "Goal progress: Income + Bonus"
    assert data["goal"]["progress_percent"] == 100.0
    assert data["goal"]["completed"] is True

    listed = client.get(url, params={"user_id": USER_ID}).json()
    assert [c["value"] for c in listed["contributions"]] == [1100.0]


def test_goal_progress_outside_period(client: TestClient, goal: dict):
    late = (utc_today() + timedelta(days=21)).isoformat()
    response = client.post(
        f"/v1/goals/{goal['id']}/progress",
        json={"user_id": USER_ID, "value": "10.00", "progress_date": late},
    )
    assert response.status_code == 422
    assert "outside the goal period" in response.json()["detail"]

    zero = client.post(
        f"/v1/goals/{goal['id']}/progress",
        json={"user_id": USER_ID, "value": "0", "progress_date": utc_today().isoformat()},
    )
    assert zero.status_code == 422


def test_update_and_delete_goal(client: TestClient, goal: dict):
    url = f"/v1/goals/{goal['id']}"
    client.post(f"{url}/progress", json={"user_id": USER_ID, "value": "250.00", "progress_date": utc_today().isoformat()})

    response = client.put(url, json=goal_body(target_value="500.00"))
    assert response.status_code == 200
    assert response.json()["target_value"] == 500.0
    assert response.json()["progress_percent"] == 50.0

    assert client.get(url, params={"user_id": "user_2"}).status_code == 404
    assert client.delete(url, params={"user_id": USER_ID}).status_code == 204
    assert client.get(url, params={"user_id": USER_ID}).status_code == 404
    assert client.get(f"{url}/progress", params={"user_id": USER_ID}).status_code == 404
