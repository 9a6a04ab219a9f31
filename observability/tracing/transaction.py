"""
Transaction handle wrapping one OpenTelemetry root span.

A transaction is a root span; its spans are children started with the
transaction as explicit parent. The handle also switches the ambient
active span (the span held in the attached OpenTelemetry context) so code
that calls `trace.get_current_span()` sees the right parent.

Example:
    from observability.tracing import get_new_transaction

    transaction = get_new_transaction("Rebuild search index", "task.reindex")
    span = transaction.create_span("db.query", "Load documents")
    ...
    transaction.finish_span(span)
    transaction.finish()

Every started span and transaction must be finished. `measure()` and the
`with` forms take care of that.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, TypeVar

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from config.logger import log

from .tracer import get_tracer

T = TypeVar("T")

OPERATION_ATTRIBUTE = "tracing.operation"
DESCRIPTION_ATTRIBUTE = "tracing.description"


def record_error(span: Span, exc: BaseException) -> None:
    """Attach error information to `span`."""
    if not span.is_recording():
        return
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))


class TracedTransaction:
    """Handle around one transaction (root span) and the spans started under it."""

    def __init__(
        self,
        span: Span,
        name: str,
        operation: str,
        auto_finish_on_shutdown: bool = True,
    ) -> None:
        self._span = span
        self.name = name
        self.operation = operation
        self.auto_finish_on_shutdown = auto_finish_on_shutdown
        self._finished = False
        # Ambient context to restore once the transaction is finished.
        self._outer_context: Optional[otel_context.Context] = None

    def __repr__(self) -> str:
        state = "finished" if self._finished else "active"
        return f"<TracedTransaction {self.name!r} op={self.operation!r} {state}>"

    @property
    def underlying(self) -> Span:
        """The wrapped OpenTelemetry root span."""
        return self._span

    @property
    def finished(self) -> bool:
        return self._finished

    def activate(self, span: Optional[Span] = None) -> None:
        """Make `span` (default: this transaction) the ambient active span."""
        if self._outer_context is None:
            self._outer_context = otel_context.get_current()
        target = span if span is not None else self._span
        otel_context.attach(trace.set_span_in_context(target))

    def create_span(
        self,
        operation: str,
        description: Optional[str] = None,
        make_current: bool = False,
    ) -> Span:
        """Start a child span of this transaction, optionally making it the active span."""
        attributes: Dict[str, str] = {OPERATION_ATTRIBUTE: operation}
        if description is not None:
            attributes[DESCRIPTION_ATTRIBUTE] = description

        span = get_tracer(__name__).start_span(
            description or operation,
            context=trace.set_span_in_context(self._span),
            attributes=attributes,
        )
        if make_current:
            self.activate(span)
        return span

    def finish_span(self, span: Span) -> None:
        """End `span` and set the active span back to this transaction.

        The span is assumed to belong to this transaction; this is not checked.
        """
        span.end()
        self.activate()

    def finish(self) -> None:
        """Finish the transaction, releasing the current-transaction slot if it holds it."""
        from . import registry

        was_current = registry.get_current_transaction() is self
        if was_current:
            registry.reset()

        self._span.end()
        self._finished = True
        # An orphaned transaction must not clobber the newer transaction's active span.
        owns_context = was_current or trace.get_current_span() is self._span
        if self._outer_context is not None and owns_context:
            otel_context.attach(self._outer_context)
        self._outer_context = None
        log.debug("Finished transaction %r (%s)", self.name, self.operation)

    def measure(
        self,
        name: str,
        operation: str,
        fn: Callable[..., T],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> T:
        """Shortcut to `measure_wrapper` applied to this transaction."""
        from .registry import measure_wrapper

        return measure_wrapper(name, operation, fn, args, kwargs, transaction=self)

    @contextmanager
    def span(
        self,
        operation: str,
        description: Optional[str] = None,
        make_current: bool = False,
    ) -> Iterator[Span]:
        """
        Context manager for a span that is finished on exit.

        Example:
            with transaction.span("http.request", "Fetch rates") as span:
                span.set_attribute("http.url", url)
                ...
        """
        span = self.create_span(operation, description, make_current)
        try:
            yield span
        except Exception as exc:  # noqa: BLE001
            record_error(span, exc)
            raise
        finally:
            self.finish_span(span)

    def __enter__(self) -> "TracedTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is not None:
            record_error(self._span, exc)
        self.finish()
        return False
