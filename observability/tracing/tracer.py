"""
Initialize OpenTelemetry tracing and connect it to Arize Phoenix.

Call `configure_tracing()` once at application startup (e.g. in api/main.py)
so that the tracer provider is configured before any transactions are created.
When Phoenix is disabled or unreachable nothing is registered and the
OpenTelemetry API hands out non-recording spans, so instrumented code runs
unchanged.
"""

from __future__ import annotations

import socket
from typing import Optional
from urllib.parse import urlparse

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from phoenix.otel import register

from config.logger import log
from config.settings import TracingConfig

_DEFAULT_TRACER_NAME = "simplified-tracing"

tracer_provider: Optional[TracerProvider] = None


def _can_connect(endpoint: str, grpc: bool = False) -> bool:
    try:
        parsed = urlparse(endpoint)
        host = parsed.hostname or "localhost"
        port = parsed.port or (4317 if grpc else 80)
        with socket.create_connection((host, port), timeout=0.8):
            return True
    except (OSError, ValueError):
        return False


def configure_tracing(config: Optional[TracingConfig] = None) -> Optional[TracerProvider]:
    """
    Register Phoenix as the OpenTelemetry backend.

    This sets a global TracerProvider so all OTEL instrumentation
    (FastAPI, HTTP, transactions) sends traces to Phoenix. Returns the
    provider, or None when tracing stays on the no-op API.
    """
    global tracer_provider

    if tracer_provider is not None:
        return tracer_provider

    from .registry import set_auto_finish_default

    config = config or TracingConfig.from_env()
    set_auto_finish_default(config.auto_finish_on_shutdown)
    if not config.enabled:
        log.info("Tracing disabled; transactions will not be recorded")
        return None

    endpoint = config.resolved_endpoint
    if not _can_connect(endpoint, grpc=config.protocol == "grpc"):
        log.warning("Phoenix collector %s unreachable; tracing disabled", endpoint)
        return None

    tracer_provider = register(
        project_name=config.project_name,
        endpoint=endpoint,
        protocol=config.protocol,
        auto_instrument=False,
        batch=config.batch,
    )
    log.info("Tracing to Phoenix project %r at %s", config.project_name, endpoint)
    return tracer_provider


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """
    Get an OpenTelemetry tracer.

    Use this instead of calling trace.get_tracer() directly so that all
    transactions are consistently created against the configured provider.

    Example:
        from observability.tracing import get_tracer

        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("my-span"):
            ...
    """
    tracer_name = name or _DEFAULT_TRACER_NAME
    if tracer_provider is not None:
        return tracer_provider.get_tracer(tracer_name)
    return trace.get_tracer(tracer_name)
