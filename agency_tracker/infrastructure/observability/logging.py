"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from agency_tracker.config import settings


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


def log_snapshot(
    user_id: str,
    calculated_for: str,
    credit_agency_cents: int,
    backed_agency_cents: int,
    duration_ms: float,
    request_id: Optional[str] = None,
) -> None:
    """Log structured snapshot outcome for analysis"""
    logging.info(
        "Agency snapshot calculated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "agency_snapshot_complete",
            "calculated_for": calculated_for,
            "credit_agency_cents": credit_agency_cents,
            "backed_agency_cents": backed_agency_cents,
            "duration_ms": duration_ms,
        },
    )


def log_transition(entity: str, entity_id: str, from_status: str, to_status: str) -> None:
    """Log a lifecycle transition of a projected expense or savings goal"""
    logging.info(
        "Status transition",
        extra={
            "step": "status_transition",
            "entity": entity,
            "entity_id": entity_id,
            "from_status": from_status,
            "to_status": to_status,
        },
    )
