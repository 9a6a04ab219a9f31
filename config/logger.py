"""Central logging configuration for simplified tracing.

All modules should import `log` from this file instead of configuring the
`logging` module themselves. Console lines carry the name of the current
transaction (`-` outside one); the web app uses the JSON logger from
`observability.logging` instead.
"""

from __future__ import annotations

import logging
import os
import sys

LOGGER_NAME = "simplified_tracing"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | [%(transaction)s] %(message)s"


class TransactionFilter(logging.Filter):
    """Stamps `record.transaction` with the current transaction name."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily: the registry itself logs through this module.
        from observability.tracing.registry import get_current_transaction

        current = get_current_transaction()
        record.transaction = current.name if current is not None else "-"
        return True


class ColorFormatter(logging.Formatter):
    """Colours the level name; leaves the record untouched for other handlers."""

    RESET = "\033[0m"
    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if not color:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def configure_root_logger(level: str | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:  # Already configured.
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(LOG_FORMAT))
    handler.addFilter(TransactionFilter())

    logger.addHandler(handler)
    logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger


log: logging.Logger = configure_root_logger()
