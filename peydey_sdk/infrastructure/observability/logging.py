"""Structured JSON logging and the SDK call history"""

import logging
import sys
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger.json import JsonFormatter
from peydey_sdk.domain.results import CallRecord, SDKStats

SDK_LOGGER_NAME = "peydey_sdk"


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "peydey-sdk", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "peydey-sdk") -> None:
    """Configure structured JSON logging for the SDK logger tree"""
    logger = logging.getLogger(SDK_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_withdrawal(
    session_id: str,
    user_id: str,
    request_id: str | None,
    outcome: str,
    amount: str,
    duration_ms: float,
) -> None:
    """Log structured withdrawal outcome for analysis"""
    logging.getLogger(SDK_LOGGER_NAME).info(
        "Withdrawal request handled",
        extra={
            "session_id": session_id,
            "user_id": user_id,
            "request_id": request_id,
            "step": "withdrawal_initiated",
            "outcome": outcome,
            "amount": amount,
            "duration_ms": duration_ms,
        },
    )


class CallHistory:
    """
    Per-instance record of SDK steps.

    With debug enabled, every entry is also emitted on the SDK logger.
    """

    def __init__(self, logger: logging.Logger, debug: bool = False):
        self.logger = logger
        self.debug = debug
        self._calls: List[CallRecord] = []

    def log(self, message: str, call_type: str = "log", **data: Any) -> None:
        if self.debug:
            self.logger.info(message, extra={"step_data": data})
        self._calls.append(CallRecord(type=call_type, message=message, data=data, timestamp=time.time()))

    def calls(self) -> List[CallRecord]:
        return list(self._calls)

    def clear(self) -> None:
        self._calls = []

    def stats(self) -> SDKStats:
        return SDKStats(
            total_calls=len(self._calls),
            call_types=dict(Counter(call.type for call in self._calls)),
            last_call=self._calls[-1] if self._calls else None,
        )
