from django.test import TestCase


class HealthEndpointTests(TestCase):
    def test_live(self):
        response = self.client.get("/api/health/live")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "alive"})

    def test_ready_reports_each_check(self):
        response = self.client.get("/api/health/ready")
        body = response.json()
        self.assertEqual(
            set(body["checks"]), {"database", "migrations", "cache", "storage"}
        )
        self.assertEqual(body["checks"]["database"], "ok")
        self.assertEqual(body["checks"]["migrations"], "ok")
        self.assertEqual(body["status"], "ready")
        self.assertEqual(response.status_code, 200)
