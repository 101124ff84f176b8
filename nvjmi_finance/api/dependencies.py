"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Request
from nvjmi_finance.config import settings
from nvjmi_finance.domain.affordability import AffordabilityPolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Calendar day used for due-state and affordability windows (overridden in tests)"""
    return date.today()


def get_affordability_policy() -> AffordabilityPolicy:
    """Provide spend-tier thresholds from configuration"""
    return AffordabilityPolicy(healthy_floor_cents=settings.healthy_floor_cents)
