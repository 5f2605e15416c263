"""Structured JSON logging for the console service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from ledgerx_console.domain.models import BatchSummary

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping each record with UTC time, level and service"""

    def __init__(self, *args: Any, service: str = "ledgerx-console", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "ledgerx-console") -> None:
    """Route every log record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service=service))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_batch(request_id: str, summary: BatchSummary) -> None:
    """Log structured stress-test outcome for analysis"""
    logging.getLogger("ledgerx_console.batch").info(
        summary.describe(),
        extra={
            "request_id": request_id,
            "step": "batch_complete",
            "requested": summary.requested,
            "succeeded": summary.succeeded,
            "conflicts": summary.conflicts,
            "insufficient_funds": summary.insufficient_funds,
            "other_errors": summary.other_errors,
            "duration_ms": summary.duration_ms,
        },
    )
