"""Prometheus metrics for plan saves, schedule edits and affordability tiers"""

from prometheus_client import Counter, Histogram

# Plan metrics
plan_save_counter = Counter(
    "nvjmi_plan_saves_total",
    "BNPL plan saves",
    ["action", "outcome"],  # create | update | payment, success | failure
)

schedule_regeneration_counter = Counter(
    "nvjmi_schedule_regenerations_total",
    "Schedules generated or redistributed from a total and count",
)

schedule_mismatch_counter = Counter(
    "nvjmi_schedule_mismatch_warnings_total",
    "Saved schedules whose sum drifted from the stated total",
)

# Affordability metrics
available_to_spend_tier_counter = Counter(
    "nvjmi_available_to_spend_tier",
    "Available-to-spend projections by tier",
    ["tier"],  # critical | caution | healthy
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan_save(action: str, success: bool, mismatch: bool = False) -> None:
    """Record plan save outcome and schedule drift warnings"""
    plan_save_counter.labels(action=action, outcome="success" if success else "failure").inc()
    if mismatch:
        schedule_mismatch_counter.inc()


def record_available_to_spend(tier: str) -> None:
    available_to_spend_tier_counter.labels(tier=tier).inc()
