import logging

from django.test import TestCase

from core.middleware import MAX_REQUEST_ID_LENGTH, RequestIDFilter


class RequestIDMiddlewareTests(TestCase):
    def test_inbound_request_id_echoed(self):
        response = self.client.get(
            "/api/health/live", HTTP_X_REQUEST_ID="trace-abc-123"
        )
        self.assertEqual(response["X-Request-ID"], "trace-abc-123")

    def test_request_id_generated_when_missing(self):
        response = self.client.get("/api/health/live")
        self.assertTrue(response["X-Request-ID"])

    def test_oversized_request_id_replaced(self):
        long_id = "x" * (MAX_REQUEST_ID_LENGTH + 1)
        response = self.client.get("/api/health/live", HTTP_X_REQUEST_ID=long_id)
        self.assertNotEqual(response["X-Request-ID"], long_id)


class RequestIDFilterTests(TestCase):
    def test_filter_defaults_to_dash(self):
        record = logging.LogRecord("apps", logging.INFO, __file__, 1, "msg", (), None)
        self.assertTrue(RequestIDFilter().filter(record))
        self.assertEqual(record.request_id, "-")
