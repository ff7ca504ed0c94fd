"""Structured JSON logging for production observability"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from rahnu_gateway.config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name
        if not log_record.get("request_id") and request_id_var.get():
            log_record["request_id"] = request_id_var.get()


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


def log_loan_transition(
    loan_id: int,
    contract_number: str,
    from_status: str,
    to_status: str,
    request_id: Optional[str] = None,
) -> None:
    """Log structured loan status change for audit"""
    logging.getLogger("rahnu_gateway.lifecycle").info(
        "Loan status changed",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "contract_number": contract_number,
            "step": "loan_transition",
            "from_status": from_status,
            "to_status": to_status,
        },
    )


def log_payment_recorded(payment_id: int, loan_id: int, amount: str, paid_date: str) -> None:
    logging.getLogger("rahnu_gateway.payments").info(
        "Payment recorded",
        extra={
            "payment_id": payment_id,
            "loan_id": loan_id,
            "step": "payment_recorded",
            "amount": amount,
            "paid_date": paid_date,
        },
    )
