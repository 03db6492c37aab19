"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from deposit_disposition.config import settings
from deposit_disposition.utils.money import cents_to_display


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


def log_disposition_event(
    step: str,
    lease_id: str,
    status: str,
    refund_amount_cents: Optional[int] = None,
    **fields: Any,
) -> None:
    """Log a lifecycle step with the disposition state it left behind"""
    extra: Dict[str, Any] = {"step": step, "lease_id": lease_id, "disposition_status": status}
    message = f"Disposition {step.replace('_', ' ')}"
    if refund_amount_cents is not None:
        extra["refund_amount_cents"] = refund_amount_cents
        extra["refund_amount"] = cents_to_display(refund_amount_cents)
        message = f"{message}, refund {extra['refund_amount']}"
    extra.update(fields)
    logging.info(message, extra=extra)
