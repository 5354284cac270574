import os
import unittest
from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")

from tests.support import CALLBACK_URL, FrozenClock, make_verifier
from verifier.channels.dummy import DummySmsChannel
from verifier.core.deps import get_verifier
from verifier.core.http_hardening import current_request_id
from verifier.main import app
from verifier.services.types import Channel
from verifier.stores.memory import InMemoryStore


class VerificationApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.clock = FrozenClock()
        self.verifier = make_verifier(self.store, clock=self.clock)
        app.dependency_overrides[get_verifier] = lambda: self.verifier
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()

    def _send_mobile(self, mobile="+919876543210"):
        response = self.client.post("/api/public/verification/mobile", json={"mobile": mobile})
        self.assertEqual(response.status_code, 202)
        return response.json()

    def _last_sms_code(self):
        return self.store.read_last_pending(Channel.MOBILE, "+919876543210").secret

    def test_send_and_verify_mobile(self):
        sent = self._send_mobile()
        self.assertEqual(sent["status"], "sent")
        self.assertEqual(sent["channel"], "mobile")
        self.assertNotIn("secret", sent)

        response = self.client.post(
            "/api/public/verification/verify",
            json={"channel": "sms", "recipient": "+919876543210", "secret": self._last_sms_code()},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["request_id"], sent["request_id"])

        again = self.client.post(
            "/api/public/verification/verify",
            json={"channel": "mobile", "recipient": "+919876543210", "secret": "000000"},
        )
        self.assertEqual(again.status_code, 404)

    def test_error_statuses(self):
        self._send_mobile()
        payload = {"channel": "mobile", "recipient": "+919876543210", "secret": "bad"}

        for _ in range(3):
            self.assertEqual(self.client.post("/api/public/verification/verify", json=payload).status_code, 400)
        self.assertEqual(self.client.post("/api/public/verification/verify", json=payload).status_code, 429)

        self._send_mobile()
        self.clock.advance(hours=1)
        self.assertEqual(self.client.post("/api/public/verification/verify", json=payload).status_code, 410)

    def test_invalid_input(self):
        response = self.client.post("/api/public/verification/mobile", json={"mobile": "91a87654321"})
        self.assertEqual(response.status_code, 400)

        response = self.client.post("/api/public/verification/email", json={"email": "hello@localhost"})
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/api/public/verification/verify",
            json={"channel": "fax", "recipient": "x", "secret": "y"},
        )
        self.assertEqual(response.status_code, 400)

    def test_dispatch_failure_is_bad_gateway(self):
        self.verifier.mobile_channel = DummySmsChannel(fail_with="provider down")
        response = self.client.post("/api/public/verification/mobile", json={"mobile": "+919876543210"})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(self.store.read_last_pending(Channel.MOBILE, "+919876543210").dispatch_log[0].reason, "provider down")

    def test_email_callback_link_verifies(self):
        sent = self.client.post(
            "/api/public/verification/email",
            json={"email": "hello@example.com", "subject": "Please confirm"},
        )
        self.assertEqual(sent.status_code, 202)

        mail = self.verifier.email_channel.outbox[-1]
        self.assertEqual(mail["subject"], "Please confirm")
        start = mail["body"].index(CALLBACK_URL)
        link = mail["body"][start:mail["body"].index('"', start)]
        query = parse_qs(urlsplit(link).query)

        response = self.client.get(
            "/api/public/verification/email/callback",
            params={"email": query["email"][0], "secret": query["secret"][0]},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "verified")
        self.assertEqual(response.headers.get("cache-control"), "no-store")

    def test_failures_are_logged_with_request_id(self):
        with self.assertLogs("verifier.api.public.verification", level="INFO") as logs:
            response = self.client.post(
                "/api/public/verification/verify",
                json={"channel": "mobile", "recipient": "+919876543210", "secret": "123456"},
                headers={"X-Request-ID": "trace-404"},
            )
        self.assertEqual(response.status_code, 404)
        self.assertIn("status=404 error=NotFoundError request_id=trace-404", logs.output[0])
        self.assertEqual(current_request_id(), "-")

    def test_access_log_omits_callback_secret(self):
        with self.assertLogs("verifier.http", level="INFO") as logs:
            self.client.get(
                "/api/public/verification/email/callback",
                params={"email": "hello@example.com", "secret": "TopSecretValue"},
            )
        self.assertIn("/api/public/verification/email/callback", logs.output[0])
        self.assertNotIn("TopSecretValue", "\n".join(logs.output))


class HealthTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()

    def test_health_has_security_headers_and_request_id(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("x-frame-options"), "DENY")
        self.assertRegex(str(response.headers.get("x-request-id")), r"^[A-Za-z0-9._-]{1,128}$")

    def test_valid_request_id_is_preserved(self):
        response = self.client.get("/health", headers={"X-Request-ID": "release-check-2026_10_19"})
        self.assertEqual(response.headers.get("x-request-id"), "release-check-2026_10_19")

    def test_invalid_request_id_is_replaced(self):
        response = self.client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        self.assertNotEqual(response.headers.get("x-request-id"), "bad id with spaces")


if __name__ == "__main__":
    unittest.main()
