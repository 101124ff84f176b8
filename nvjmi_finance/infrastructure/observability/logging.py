"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

from nvjmi_finance.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_plan_saved(
    request_id: str,
    user_id: str,
    plan_id: str,
    action: str,
    installments: int,
    status: str,
    warnings: List[str],
) -> None:
    """Log structured plan save outcome"""
    logging.info(
        "Plan saved",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "plan_id": plan_id,
            "step": f"plan_{action}",
            "installments": installments,
            "plan_status": status,
            "warnings": warnings,
        },
    )


def log_available_to_spend(
    request_id: str,
    user_id: str,
    tier: str,
    available_cents: int,
    due_before_payday_cents: int,
    duration_ms: float,
) -> None:
    """Log affordability projection for trend analysis"""
    logging.info(
        "Available to spend computed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "available_to_spend",
            "tier": tier,
            "available_cents": available_cents,
            "due_before_payday_cents": due_before_payday_cents,
            "duration_ms": duration_ms,
        },
    )
