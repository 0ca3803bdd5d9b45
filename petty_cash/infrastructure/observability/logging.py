"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from petty_cash.config import settings

logger = logging.getLogger("petty_cash")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_transition(
    kind: str,
    entity_id: int,
    outcome: str,
    actor_id: str,
    running_balance: Optional[Decimal] = None,
) -> None:
    """Log structured approval outcome for audit"""
    logger.info(
        "Decision recorded",
        extra={
            "step": "decision_complete",
            "entity": kind,
            "entity_id": entity_id,
            "outcome": outcome,
            "actor_id": actor_id,
            "running_balance": str(running_balance) if running_balance is not None else None,
        },
    )


def log_ledger_append(entry_id: int, sequence: int, amount: Decimal, running_balance: Decimal) -> None:
    """Log each ledger append with its resulting balance"""
    logger.info(
        "Ledger entry appended",
        extra={
            "step": "ledger_append",
            "entry_id": entry_id,
            "sequence": sequence,
            "amount": str(amount),
            "running_balance": str(running_balance),
        },
    )
