"""
Decorator form of the measurement helper.

`@measured()` on functions like:
- outbound HTTP calls
- database queries
- expensive computations
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional, TypeVar, cast

from .registry import get_current_transaction, measure_wrapper

F = TypeVar("F", bound=Callable[..., Any])


def measured(
    name: Optional[str] = None,
    operation: str = "function",
    use_current: bool = True,
) -> Callable[[F], F]:
    """
    Decorator that routes every call through `measure_wrapper`.

    With `use_current` the span goes into the current transaction when
    there is one; otherwise each call gets its own transaction.
    Sync functions only.

    Example:
        @measured("Load fixtures", "db.query")
        def load_fixtures(path): ...
    """

    def decorator(func: F) -> F:
        measure_name = name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            transaction = get_current_transaction() if use_current else None
            return measure_wrapper(
                measure_name,
                operation,
                func,
                args,
                kwargs,
                transaction=transaction,
            )

        return cast(F, wrapper)

    return decorator
