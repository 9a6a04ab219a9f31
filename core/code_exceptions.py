"""Custom exception hierarchy for simplified tracing."""

class TracingError(Exception):
    """Base exception for all tracing helper errors."""


class TracingConfigError(TracingError):
    """Raised when tracing configuration values are invalid."""
