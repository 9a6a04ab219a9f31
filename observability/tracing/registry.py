"""
Process-wide current transaction and the measurement helper.

At most one transaction is "current" at a time. It is set when a
transaction is created through `get_new_transaction` and cleared when that
transaction is finished. There is no nesting: creating a transaction while
another one is current replaces it without finishing it.

The slot is plain module state with no locking. It assumes one request at
a time per process.

IT IS VITAL THAT ANY STARTED MEASUREMENT IS FINISHED. `measure_wrapper`
does this for you unless the measured function raises, in which case the
span and any transaction it created are left open.
"""

from __future__ import annotations

import atexit
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

from opentelemetry.context import Context
from opentelemetry.trace import Span

from config.logger import log

from .tracer import get_tracer
from .transaction import OPERATION_ATTRIBUTE, TracedTransaction

T = TypeVar("T")

current_transaction: Optional[TracedTransaction] = None

_auto_finish_default = True
_shutdown_hook_registered = False


def set_auto_finish_default(enabled: bool) -> None:
    """Set `auto_finish_on_shutdown` for transactions created from now on."""
    global _auto_finish_default
    _auto_finish_default = enabled


def get_new_transaction(name: str, operation: str) -> TracedTransaction:
    """
    Start a transaction and make it the active span and the current transaction.

    Any transaction that was current before is orphaned, not finished.
    """
    global current_transaction

    span = get_tracer(__name__).start_span(
        name,
        context=Context(),
        attributes={OPERATION_ATTRIBUTE: operation},
    )
    transaction = TracedTransaction(
        span, name, operation, auto_finish_on_shutdown=_auto_finish_default
    )
    transaction.activate()

    if current_transaction is not None:
        log.warning(
            "Transaction %r replaced while still current; it will not be finished",
            current_transaction.name,
        )
    current_transaction = transaction
    _register_shutdown_hook()
    log.debug("Started transaction %r (%s)", name, operation)
    return transaction


def get_current_transaction() -> Optional[TracedTransaction]:
    return current_transaction


def finish_span(span: Optional[Span], transaction: Optional[TracedTransaction] = None) -> None:
    """Finish `span` in `transaction`, or in the current transaction when none is given."""
    if span is None:
        return
    if transaction is None:
        if current_transaction is None:
            return
        transaction = current_transaction
    transaction.finish_span(span)


def reset() -> None:
    """Clear the current transaction slot without finishing it."""
    global current_transaction
    current_transaction = None


def measure_wrapper(
    name: str,
    operation: str,
    fn: Callable[..., T],
    args: Sequence[Any] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
    transaction: Optional[TracedTransaction] = None,
) -> T:
    """
    Call `fn(*args, **kwargs)` inside a span and return its result.

    Without a `transaction` a new one named `name` is created for the call
    and finished afterwards. With one, the span is added to it and the
    transaction is left open.

    Example:
        rows = measure_wrapper(
            "Fetch rates", "http.request", client.get_rates, ("EUR",)
        )
    """
    created = False
    if transaction is None:
        transaction = get_new_transaction(name, operation)
        created = True

    span = transaction.create_span(operation)
    result = fn(*args, **(kwargs or {}))
    transaction.finish_span(span)

    if created:
        transaction.finish()
    return result


def _finish_on_shutdown() -> None:
    transaction = current_transaction
    if transaction is None or not transaction.auto_finish_on_shutdown:
        return
    log.debug("Finishing transaction %r at shutdown", transaction.name)
    transaction.finish()


def _register_shutdown_hook() -> None:
    # Registered lazily so it runs before the TracerProvider's own exit hook.
    global _shutdown_hook_registered
    if _shutdown_hook_registered:
        return
    atexit.register(_finish_on_shutdown)
    _shutdown_hook_registered = True
