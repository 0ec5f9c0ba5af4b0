"""Prometheus metrics for monitoring withdrawal volume, SDK steps and WPS performance"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Withdrawal metrics
withdrawal_counter = Counter(
    "peydey_withdrawal_requests_total",
    "Total early-access withdrawal requests",
    ["outcome"],  # initiated | rejected | not_eligible
)

withdrawal_amount_bucket_counter = Counter(
    "peydey_withdrawal_amount_bucket",
    "Initiated withdrawals by amount bucket",
    ["bucket"],  # <100, 100-500, 500-1000, 1000+
)

# WPS metrics
authority_latency_histogram = Histogram(
    "peydey_authority_latency_seconds",
    "WPS call response time",
    ["operation"],  # validate_user | process_withdrawal
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

authority_failure_counter = Counter(
    "peydey_authority_failures_total",
    "Failed or timed-out WPS calls",
    ["operation"],
)

# User directory
directory_failure_counter = Counter(
    "peydey_directory_failures_total",
    "Failed user directory lookups",
)

# SDK steps
step_counter = Counter(
    "peydey_sdk_steps_total",
    "SDK flow steps by outcome",
    ["step", "outcome"],  # outcome: success | failure
)


def record_withdrawal(outcome: str, amount: Decimal | None = None) -> None:
    """Record withdrawal metrics for monitoring volume and amount distribution"""
    withdrawal_counter.labels(outcome=outcome).inc()

    if outcome != "initiated" or amount is None:
        return

    # Bucket amounts (AED) for distribution analysis
    if amount < 100:
        bucket = "<100"
    elif amount < 500:
        bucket = "100-500"
    elif amount < 1000:
        bucket = "500-1000"
    else:
        bucket = "1000+"

    withdrawal_amount_bucket_counter.labels(bucket=bucket).inc()


def record_step(step: str, success: bool) -> None:
    step_counter.labels(step=step, outcome="success" if success else "failure").inc()
