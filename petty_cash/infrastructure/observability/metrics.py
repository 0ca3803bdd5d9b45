"""Prometheus metrics for monitoring approvals, ledger appends, and float balance"""

from decimal import Decimal

from prometheus_client import Counter, Histogram, Gauge

# Decision metrics
decision_counter = Counter(
    "petty_cash_decision_total",
    "Total approval decisions made",
    ["entity", "outcome"],  # transaction | replenishment, approved | rejected
)

submission_counter = Counter(
    "petty_cash_submission_total",
    "Entities submitted for approval",
    ["entity"],
)

# Ledger metrics
ledger_append_counter = Counter(
    "petty_cash_ledger_append_total",
    "Entries appended to the ledger",
    ["direction"],  # expense | credit
)

ledger_append_latency_histogram = Histogram(
    "petty_cash_ledger_append_seconds",
    "Time spent reading the latest entry and flushing the appended one",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

ledger_append_failure_counter = Counter(
    "petty_cash_ledger_append_failures_total",
    "Ledger appends rolled back by the store",
)

current_balance_gauge = Gauge(
    "petty_cash_current_balance",
    "Running balance of the latest ledger entry",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(entity: str, outcome: str) -> None:
    decision_counter.labels(entity=entity, outcome=outcome).inc()


def record_ledger_append(amount: Decimal, running_balance: Decimal) -> None:
    """Record append direction and publish the new float balance"""
    direction = "expense" if amount < 0 else "credit"
    ledger_append_counter.labels(direction=direction).inc()
    current_balance_gauge.set(float(running_balance))
