"""Prometheus metrics for loan lifecycle, repayments and reminder delivery"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Lifecycle metrics
loan_transition_counter = Counter(
    "rahnu_loan_transition_total",
    "Loan status transitions",
    ["from_status", "to_status"],
)

loans_created_counter = Counter(
    "rahnu_loans_created_total",
    "Loan applications submitted",
)

financing_amount_histogram = Histogram(
    "rahnu_financing_amount_myr",
    "Financing amount of submitted applications in MYR",
    buckets=[1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000],
)

# Repayment metrics
payments_recorded_counter = Counter(
    "rahnu_payments_recorded_total",
    "Installments marked as paid",
)

# Reminder metrics
reminder_counter = Counter(
    "rahnu_reminders_total",
    "Payment reminders dispatched",
    ["channel", "outcome"],  # outcome: sent | failed
)

reminder_latency_histogram = Histogram(
    "reminder_gateway_latency_seconds",
    "Messaging gateway response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

reminder_failure_counter = Counter(
    "reminder_gateway_failures_total",
    "Failed messaging gateway attempts",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_created(financing_amount: Decimal) -> None:
    loans_created_counter.inc()
    financing_amount_histogram.observe(float(financing_amount))


def record_transition(from_status: str, to_status: str) -> None:
    """Count a loan moving between two lifecycle states"""
    loan_transition_counter.labels(from_status=from_status, to_status=to_status).inc()
