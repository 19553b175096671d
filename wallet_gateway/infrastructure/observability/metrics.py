"""Prometheus metrics for payments, recurring firings and record store health"""

from prometheus_client import Counter, Histogram

# Debt metrics
debt_payment_counter = Counter(
    "wallet_debt_payments_total",
    "Debt payment attempts",
    ["outcome"],  # applied | rejected | partial | compensated
)

debt_payment_amount_histogram = Histogram(
    "wallet_debt_payment_amount",
    "Applied debt payment amounts",
    buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000],
)

# Recurring metrics
recurring_fire_counter = Counter(
    "wallet_recurring_fired_total",
    "Transactions materialized from recurring series",
    ["trigger"],  # first_occurrence | manual
)

# Record store metrics
record_store_failures_counter = Counter(
    "record_store_failures_total",
    "Failed record store calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(outcome: str, amount: float | None = None) -> None:
    """Record payment outcome and, when applied, its amount"""
    debt_payment_counter.labels(outcome=outcome).inc()
    if outcome == "applied" and amount is not None:
        debt_payment_amount_histogram.observe(amount)


def record_firing(trigger: str) -> None:
    recurring_fire_counter.labels(trigger=trigger).inc()


# Accounts and goals
transfer_counter = Counter(
    "wallet_transfers_total",
    "Transfers between accounts",
    ["outcome"],  # applied | rejected
)

transfer_amount_histogram = Histogram(
    "wallet_transfer_amount",
    "Applied transfer amounts",
    buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000],
)

goal_contribution_counter = Counter(
    "wallet_goal_contributions_total",
    "Contributions recorded towards financial goals",
    ["mode"],  # inserted | merged
)


def record_transfer(outcome: str, amount: float | None = None) -> None:
    transfer_counter.labels(outcome=outcome).inc()
    if outcome == "applied" and amount is not None:
        transfer_amount_histogram.observe(amount)


def record_contribution(merged: bool) -> None:
    goal_contribution_counter.labels(mode="merged" if merged else "inserted").inc()
