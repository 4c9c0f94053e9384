"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from ledger_insights.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_health_score(
    scope: str,
    owner_id: int,
    score: float,
    level: str,
    duration_ms: float,
    at_risk: bool = False,
) -> None:
    """Log structured health score outcome for analysis"""
    logging.info(
        "Health score calculated",
        extra={
            "scope": scope,
            "owner_id": owner_id,
            "step": "health_score_complete",
            "score": round(score, 2),
            "score_level": level,
            "at_risk": at_risk,
            "duration_ms": duration_ms,
        },
    )


def log_settings_refresh(reason: str, inss_amount: float, manual_bracket: int, duration_ms: float) -> None:
    """Log a settings cache refresh from the backing store"""
    logging.info(
        "Settings cache refreshed",
        extra={
            "step": "settings_refresh",
            "reason": reason,  # initial | expired | invalidated
            "inss_amount": inss_amount,
            "manual_bracket": manual_bracket,
            "duration_ms": duration_ms,
        },
    )
