"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from wallet_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Send every record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(stdout_handler)

    # httpx logs every record store call at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_debt_payment(
    user_id: str,
    debt_id: str,
    amount: Any,
    new_current_amount: Any,
    outcome: str,
    request_id: Optional[str] = None,
) -> None:
    """Log structured payment outcome (applied | rejected | partial | compensated)"""
    logging.info(
        "Debt payment processed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "debt_id": debt_id,
            "step": "debt_payment",
            "outcome": outcome,
            "amount": str(amount),
            "new_current_amount": None if new_current_amount is None else str(new_current_amount),
        },
    )


def log_recurring_fired(
    user_id: str,
    series_id: Optional[str],
    trigger: str,
    transaction_date: Any,
    next_occurrence_date: Any,
) -> None:
    """Log a recurring series firing (first_occurrence | manual)"""
    logging.info(
        "Recurring transaction fired",
        extra={
            "user_id": user_id,
            "series_id": series_id,
            "step": "recurring_fire",
            "trigger": trigger,
            "transaction_date": str(transaction_date),
            "next_occurrence_date": str(next_occurrence_date),
        },
    )


def log_transfer(user_id: str, from_account_id: str, to_account_id: str, amount: Any) -> None:
    logging.info(
        "Transfer recorded",
        extra={
            "user_id": user_id,
            "step": "transfer",
            "from_account_id": from_account_id,
            "to_account_id": to_account_id,
            "amount": str(amount),
        },
    )


def log_goal_contribution(user_id: str, goal_id: str, value: Any, progress_date: Any, merged: bool) -> None:
    """Log a goal contribution; `merged` when it was added to that day's existing row"""
    logging.info(
        "Goal contribution recorded",
        extra={
            "user_id": user_id,
            "goal_id": goal_id,
            "step": "goal_contribution",
            "value": str(value),
            "progress_date": str(progress_date),
            "merged": merged,
        },
    )
