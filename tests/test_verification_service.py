import os
import unittest
from datetime import timedelta
from unittest.mock import Mock

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")

from tests.support import FrozenClock, make_verifier
from verifier.core.config import VerifierConfig
from verifier.core.errors import ConfigurationError, DispatchError, NotFoundError
from verifier.services.types import Channel, Failed, VerificationRequest, VerificationStatus
from verifier.services.verification import Verifier, evaluate_attempt
from verifier.stores.memory import InMemoryStore


class EvaluateAttemptTests(unittest.TestCase):
    def setUp(self):
        self.now = FrozenClock().now
        self.request = VerificationRequest(
            id="req-1",
            channel=Channel.MOBILE,
            recipient="+919876543210",
            secret="123456",
            secret_expiry=self.now + timedelta(minutes=10),
        )

    def _evaluate(self, attempts, secret, now=None):
        self.request.attempts = attempts
        return evaluate_attempt(self.request, secret, now=now or self.now, max_attempts=3)

    def test_matching_secret_within_limits_is_verified(self):
        self.assertEqual(self._evaluate(1, "123456"), VerificationStatus.VERIFIED)
        self.assertEqual(self._evaluate(3, "123456"), VerificationStatus.VERIFIED)

    def test_wrong_secret_is_rejected(self):
        self.assertEqual(self._evaluate(1, "654321"), VerificationStatus.REJECTED)
        self.assertEqual(self._evaluate(2, ""), VerificationStatus.REJECTED)

    def test_attempts_over_limit_win_over_everything(self):
        late = self.now + timedelta(hours=1)
        self.assertEqual(self._evaluate(4, "123456"), VerificationStatus.ATTEMPTS_EXCEEDED)
        self.assertEqual(self._evaluate(4, "bad", now=late), VerificationStatus.ATTEMPTS_EXCEEDED)

    def test_expiry_wins_over_wrong_secret(self):
        late = self.now + timedelta(minutes=10, microseconds=1)
        self.assertEqual(self._evaluate(1, "bad", now=late), VerificationStatus.EXPIRED)
        self.assertEqual(self._evaluate(1, "123456", now=late), VerificationStatus.EXPIRED)


class VerifierConfigurationTests(unittest.TestCase):
    def test_new_email_requires_callback_url(self):
        store = InMemoryStore()
        verifier = make_verifier(store, email_callback_url="")
        with self.assertRaises(ConfigurationError):
            verifier.new_email("hello@example.com")
        with self.assertRaises(NotFoundError):
            store.read_last_pending(Channel.EMAIL, "hello@example.com")

    def test_missing_channel_is_a_configuration_error(self):
        verifier = Verifier(VerifierConfig(), InMemoryStore(), clock=FrozenClock())
        request = verifier.new_request(Channel.MOBILE, "+919876543210")
        with self.assertRaises(ConfigurationError):
            verifier.new_mobile_with_request(request, "code")

    def test_channel_mismatch_is_refused(self):
        verifier = make_verifier(InMemoryStore())
        request = verifier.new_request(Channel.MOBILE, "+919876543210")
        with self.assertRaises(ValueError):
            verifier.new_email_with_request(request, "Subject", "body")

    def test_unexpected_provider_error_is_wrapped(self):
        store = InMemoryStore()
        channel = Mock()
        channel.send.side_effect = RuntimeError("socket closed")
        verifier = make_verifier(store, mobile_channel=channel)

        with self.assertRaises(DispatchError) as ctx:
            verifier.new_mobile("+919876543210")
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

        stored = store.read_last_pending(Channel.MOBILE, "+919876543210")
        self.assertEqual(stored.dispatch_log, [Failed(reason="socket closed")])

    def test_configured_subject_is_used_when_caller_sends_none(self):
        verifier = make_verifier(InMemoryStore(), default_email_subject="Welcome aboard")
        verifier.new_email("hello@example.com", None)
        self.assertEqual(verifier.email_channel.outbox[-1]["subject"], "Welcome aboard")

    def test_custom_sms_template(self):
        verifier = make_verifier(InMemoryStore(), sms_template="Code {secret}, valid {validity}")
        request = verifier.new_mobile("+919876543210")
        self.assertEqual(verifier.mobile_channel.outbox[-1]["body"], f"Code {request.secret}, valid 10 minutes")

    def test_zero_max_attempts_falls_back_to_default(self):
        self.assertEqual(VerifierConfig(max_verify_attempts=0).max_verify_attempts, 3)
        self.assertEqual(VerifierConfig(max_verify_attempts=5).max_verify_attempts, 5)


if __name__ == "__main__":
    unittest.main()
