"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from agrocredit.config import settings


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


def log_order_created(request_id: str, order_id: str, agent_id: str, total_cost: Decimal) -> None:
    logging.info(
        "Order created",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "agent_id": agent_id,
            "step": "order_created",
            "total_cost": str(total_cost),
        },
    )


def log_order_decision(
    request_id: str,
    order_id: str,
    admin_id: str,
    outcome: str,
    payment_id: str | None = None,
) -> None:
    """Log structured approve/reject outcome for audit"""
    logging.info(
        "Order decision recorded",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "admin_id": admin_id,
            "step": "order_decision",
            "outcome": outcome,
            "payment_id": payment_id,
        },
    )


def log_farmer_import(request_id: str, admin_id: str, count: int) -> None:
    logging.info(
        "Farmers imported",
        extra={
            "request_id": request_id,
            "admin_id": admin_id,
            "step": "farmer_import",
            "count": count,
        },
    )
