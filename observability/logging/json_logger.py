"""
JSON logging utilities that include trace, span and transaction details when available.
"""

import json
import logging
from typing import Any, Dict, Optional

from opentelemetry import trace

from observability.tracing.registry import get_current_transaction


class JsonFormatter(logging.Formatter):
    # Standard LogRecord attributes to ignore when looking for 'extra' fields
    _SKIP_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "module", "msecs",
        "message", "msg", "name", "pathname", "process", "processName",
        "relativeCreated", "stack_info", "thread", "threadName", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        span_context = trace.get_current_span().get_span_context()
        valid = span_context.is_valid
        transaction = get_current_transaction()

        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "service": record.name,
            "trace_id": f"{span_context.trace_id:032x}" if valid else None,
            "span_id": f"{span_context.span_id:016x}" if valid else None,
            "transaction": transaction.name if transaction is not None else None,
        }

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        # Fields passed through `extra=` end up as record attributes.
        extra_fields = {
            k: v
            for k, v in record.__dict__.items()
            if k not in self._SKIP_ATTRS and not k.startswith("_")
        }
        if extra_fields:
            log_entry.update(extra_fields)

        return json.dumps(log_entry, default=str)


def get_json_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger that outputs JSON with trace, span and transaction fields.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or logging.INFO)

    # Ensure only one handler is added to avoid duplicate logs
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    return logger
