import unittest

from opentelemetry import trace
from opentelemetry.trace import StatusCode

from observability.tracing import get_current_transaction, get_new_transaction
from observability.tracing.transaction import DESCRIPTION_ATTRIBUTE, OPERATION_ATTRIBUTE, TracedTransaction
from tracing_case import TracingTestCase, provider


class TestCreateSpan(TracingTestCase):
    def test_span_is_child_of_transaction(self):
        transaction = get_new_transaction("Import orders", "task.import")
        span = transaction.create_span("db.query")
        transaction.finish_span(span)

        [child] = self.finished_spans()
        self.assertEqual(child.name, "db.query")
        self.assertEqual(child.attributes[OPERATION_ATTRIBUTE], "db.query")
        self.assertNotIn(DESCRIPTION_ATTRIBUTE, child.attributes)
        self.assertEqual(child.parent.span_id, transaction.underlying.get_span_context().span_id)

    def test_description_names_the_span(self):
        transaction = get_new_transaction("Import orders", "task.import")
        span = transaction.create_span("http.request", "Fetch exchange rates")
        transaction.finish_span(span)

        [child] = self.finished_spans()
        self.assertEqual(child.name, "Fetch exchange rates")
        self.assertEqual(child.attributes[DESCRIPTION_ATTRIBUTE], "Fetch exchange rates")

    def test_span_is_not_made_current_by_default(self):
        transaction = get_new_transaction("Import orders", "task.import")
        span = transaction.create_span("db.query")
        self.assertIs(trace.get_current_span(), transaction.underlying)
        transaction.finish_span(span)

    def test_make_current_then_finish_restores_transaction(self):
        transaction = get_new_transaction("Import orders", "task.import")
        span = transaction.create_span("db.query", make_current=True)
        self.assertIs(trace.get_current_span(), span)

        transaction.finish_span(span)
        self.assertIs(trace.get_current_span(), transaction.underlying)
        self.assertFalse(span.is_recording())


class TestFinish(TracingTestCase):
    def test_current_transaction_is_none_after_finish(self):
        transaction = get_new_transaction("Import orders", "task.import")
        transaction.finish()

        self.assertIsNone(get_current_transaction())
        self.assertTrue(transaction.finished)
        self.assertEqual(self.finished_names(), ["Import orders"])

    def test_finish_restores_outer_context(self):
        transaction = get_new_transaction("Import orders", "task.import")
        transaction.finish()
        self.assertFalse(trace.get_current_span().get_span_context().is_valid)

    def test_finishing_orphan_keeps_newer_current(self):
        first = get_new_transaction("First", "task")
        second = get_new_transaction("Second", "task")
        first.finish()

        self.assertIs(get_current_transaction(), second)
        self.assertFalse(second.finished)
        self.assertIs(trace.get_current_span(), second.underlying)

        span = second.create_span("db.query")
        self.assertEqual(span.parent.span_id, second.underlying.get_span_context().span_id)
        second.finish_span(span)
        second.finish()


class TestActivate(TracingTestCase):
    def test_switching_spans_then_finish_restores_outer_context(self):
        transaction = get_new_transaction("Import orders", "task.import")
        first = transaction.create_span("db.query", make_current=True)
        second = transaction.create_span("cache.get", make_current=True)
        self.assertIs(trace.get_current_span(), second)

        transaction.activate(first)
        self.assertIs(trace.get_current_span(), first)

        transaction.finish_span(second)
        transaction.finish_span(first)
        transaction.finish()
        self.assertFalse(trace.get_current_span().get_span_context().is_valid)

    def test_handle_outside_registry(self):
        span = provider.get_tracer("test").start_span("Standalone")
        transaction = TracedTransaction(span, "Standalone", "task")
        transaction.activate()
        self.assertIs(trace.get_current_span(), span)
        self.assertIsNone(get_current_transaction())

        transaction.finish()
        self.assertFalse(trace.get_current_span().get_span_context().is_valid)
        self.assertEqual(self.finished_names(), ["Standalone"])


class TestContextManagers(TracingTestCase):
    def test_span_block_finishes_span(self):
        transaction = get_new_transaction("Import orders", "task.import")
        with transaction.span("db.query", "Load orders", make_current=True) as span:
            self.assertIs(trace.get_current_span(), span)

        self.assertEqual(self.finished_names(), ["Load orders"])
        self.assertIs(trace.get_current_span(), transaction.underlying)

    def test_span_block_records_error(self):
        transaction = get_new_transaction("Import orders", "task.import")
        with self.assertRaises(ValueError):
            with transaction.span("db.query"):
                raise ValueError("boom")

        [child] = self.finished_spans()
        self.assertEqual(child.status.status_code, StatusCode.ERROR)
        self.assertEqual(child.events[0].name, "exception")

    def test_with_transaction_finishes_it(self):
        with get_new_transaction("Import orders", "task.import") as transaction:
            self.assertIs(get_current_transaction(), transaction)

        self.assertTrue(transaction.finished)
        self.assertIsNone(get_current_transaction())

    def test_with_transaction_records_error(self):
        with self.assertRaises(RuntimeError):
            with get_new_transaction("Import orders", "task.import"):
                raise RuntimeError("failed")

        [root] = self.finished_spans()
        self.assertEqual(root.status.status_code, StatusCode.ERROR)


class TestMeasureShortcut(TracingTestCase):
    def test_measure_uses_this_transaction(self):
        transaction = get_new_transaction("Import orders", "task.import")
        result = transaction.measure("Add", "compute", lambda a, b: a + b, (2, 3))

        self.assertEqual(result, 5)
        self.assertEqual(self.finished_names(), ["compute"])
        self.assertFalse(transaction.finished)
        self.assertIs(get_current_transaction(), transaction)


if __name__ == "__main__":
    unittest.main()
