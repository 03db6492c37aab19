"""Prometheus metrics for monitoring deadlines, letters, refunds and recalculations"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
disposition_initiated_counter = Counter(
    "deposit_disposition_initiated_total",
    "Move-out processes initiated",
)

letter_sent_counter = Counter(
    "deposit_disposition_letters_sent_total",
    "Disposition letters sent",
    ["method", "timeliness"],  # timeliness: on_time | late
)

refund_processed_counter = Counter(
    "deposit_disposition_refunds_total",
    "Deposit refunds processed",
    ["method"],
)

refund_amount_histogram = Histogram(
    "deposit_disposition_refund_dollars",
    "Refund amounts paid out",
    buckets=[0, 100, 250, 500, 1000, 2000, 5000],
)

recalculation_counter = Counter(
    "deposit_disposition_recalculations_total",
    "Disposition total recalculations",
)

damage_item_mutation_counter = Counter(
    "deposit_disposition_damage_item_changes_total",
    "Damage item create/update/delete operations",
    ["action"],
)

rejected_transition_counter = Counter(
    "deposit_disposition_rejected_transitions_total",
    "Lifecycle steps rejected from an incompatible status",
    ["status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_letter_sent(method: str, overdue: bool) -> None:
    """Count letters by delivery method, separating those sent after the deadline"""
    letter_sent_counter.labels(method=method, timeliness="late" if overdue else "on_time").inc()


def record_refund(method: str, amount_cents: int) -> None:
    refund_processed_counter.labels(method=method).inc()
    refund_amount_histogram.observe(amount_cents / 100)
