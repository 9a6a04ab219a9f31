import unittest
from unittest.mock import patch

from opentelemetry import context as otel_context
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from observability.tracing import registry

exporter = InMemorySpanExporter()
provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(exporter))


class TracingTestCase(unittest.TestCase):
    """Records finished spans in memory and isolates the current transaction per test."""

    def setUp(self):
        patcher = patch("observability.tracing.tracer.tracer_provider", provider)
        patcher.start()
        self.addCleanup(patcher.stop)

        exporter.clear()
        registry.reset()
        self.addCleanup(registry.reset)

        token = otel_context.attach(otel_context.Context())
        self.addCleanup(otel_context.detach, token)

    def finished_spans(self):
        return list(exporter.get_finished_spans())

    def finished_names(self):
        return [span.name for span in exporter.get_finished_spans()]
