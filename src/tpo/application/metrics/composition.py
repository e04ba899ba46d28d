from __future__ import annotations

from prometheus_client import Counter, Histogram

COMPOSITIONS_STARTED_TOTAL = Counter(
    "tpo_compositions_started_total",
    "Total number of order composition sessions started.",
    ["mode"],
)

ORDER_SUBMISSIONS_TOTAL = Counter(
    "tpo_order_submissions_total",
    "Total number of order submissions by outcome.",
    ["mode", "outcome"],
)

ORDER_SUBMISSION_ITEMS = Histogram(
    "tpo_order_submission_items",
    "Number of items sent per order submission.",
    buckets=(1, 2, 5, 10, 20, 50),
)

RATE_SET_FALLBACK_TOTAL = Counter(
    "tpo_rate_set_fallback_total",
    "Total number of times default currency rates were substituted.",
    ["reason"],
)

STALE_RESPONSES_DISCARDED_TOTAL = Counter(
    "tpo_stale_responses_discarded_total",
    "Total number of collaborator responses dropped because the selection changed.",
    ["kind"],
)

COLLABORATOR_FAILURES_TOTAL = Counter(
    "tpo_collaborator_failures_total",
    "Total number of failed collaborator calls.",
    ["operation"],
)

COMPOSITION_SAVE_CONFLICTS_TOTAL = Counter(
    "tpo_composition_save_conflicts_total",
    "Total number of composition saves rejected because another save landed first.",
    ["outcome"],
)


def record_composition_started(mode: str) -> None:
    COMPOSITIONS_STARTED_TOTAL.labels(mode=mode).inc()


def record_submission(mode: str, outcome: str, item_count: int = 0) -> None:
    ORDER_SUBMISSIONS_TOTAL.labels(mode=mode, outcome=outcome).inc()
    if outcome == "success":
        ORDER_SUBMISSION_ITEMS.observe(item_count)


def record_rate_set_fallback(reason: str) -> None:
    RATE_SET_FALLBACK_TOTAL.labels(reason=reason).inc()


def record_stale_response(kind: str) -> None:
    STALE_RESPONSES_DISCARDED_TOTAL.labels(kind=kind).inc()


def record_collaborator_failure(operation: str) -> None:
    COLLABORATOR_FAILURES_TOTAL.labels(operation=operation).inc()


def record_save_conflict(outcome: str) -> None:
    COMPOSITION_SAVE_CONFLICTS_TOTAL.labels(outcome=outcome).inc()
