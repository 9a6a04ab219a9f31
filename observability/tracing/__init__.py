"""
Simplified transaction tracing on top of OpenTelemetry.

This package exposes:
- `configure_tracing` / `get_tracer` – Phoenix-backed tracer setup.
- `get_new_transaction` / `get_current_transaction` / `finish_span` – the
  process-wide current transaction.
- `measure_wrapper` / `measured` – run a callable inside a span.
- `TracedTransaction` – the transaction handle.
- `instrument_fastapi` / `TransactionMiddleware` – FastAPI integration.
"""

from .tracer import configure_tracing, get_tracer
from .transaction import TracedTransaction
from .registry import (
    finish_span,
    get_current_transaction,
    get_new_transaction,
    measure_wrapper,
)
from .instrumentation import measured
from .fastapi_middleware import TransactionMiddleware, instrument_fastapi

__all__ = [
    "configure_tracing",
    "get_tracer",
    "TracedTransaction",
    "finish_span",
    "get_current_transaction",
    "get_new_transaction",
    "measure_wrapper",
    "measured",
    "TransactionMiddleware",
    "instrument_fastapi",
]
