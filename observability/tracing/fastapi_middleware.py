"""
Helpers to instrument a FastAPI app with OpenTelemetry + Phoenix and to open
one transaction per request.

Usage in api/main.py:

    from fastapi import FastAPI
    from observability.tracing import TransactionMiddleware, configure_tracing, instrument_fastapi

    app = FastAPI()
    instrument_fastapi(app, tracer_provider=configure_tracing())
    app.add_middleware(TransactionMiddleware, excluded_paths=("/api/health",))

Route handlers then reach the transaction through
`request.state.transaction` or `get_current_transaction()`.
"""

from __future__ import annotations

from typing import Iterable, Optional

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .registry import get_new_transaction
from .transaction import record_error


def instrument_fastapi(
    app: FastAPI,
    tracer_provider: Optional[TracerProvider] = None,
    excluded_urls: Optional[str] = None,
) -> None:
    """
    Attach OpenTelemetry FastAPI instrumentation to the app.

    - `tracer_provider` should be the one returned by `configure_tracing()`.
    - `excluded_urls` can be a comma-separated regex string to ignore health checks, etc.
    """
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        excluded_urls=excluded_urls,
    )


class TransactionMiddleware(BaseHTTPMiddleware):
    """Wraps each request in a transaction named `"<METHOD> <path>"`."""

    def __init__(self, app, excluded_paths: Iterable[str] = (), operation: str = "http.server") -> None:
        super().__init__(app)
        self.excluded_paths = tuple(excluded_paths)
        self.operation = operation

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or path.startswith(self.excluded_paths):
            return await call_next(request)

        transaction = get_new_transaction(f"{request.method} {path}", self.operation)
        request.state.transaction = transaction
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            record_error(transaction.underlying, exc)
            transaction.finish()
            raise
        transaction.underlying.set_attribute("http.status_code", response.status_code)
        transaction.finish()
        return response
