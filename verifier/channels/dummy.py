from __future__ import annotations

import logging
from typing import Any

from verifier.core.errors import EmailDeliveryError, SmsDeliveryError

logger = logging.getLogger(__name__)


class DummyEmailChannel:
    """Logs outgoing email instead of sending it and keeps a copy in ``outbox``."""

    def __init__(self, *, fail_with: str | None = None):
        self.fail_with = fail_with
        self.outbox: list[dict[str, str]] = []

    def send(self, sender: str, recipient: str, subject: str, body: str) -> dict[str, Any]:
        if self.fail_with:
            raise EmailDeliveryError(self.fail_with)
        self.outbox.append({"sender": sender, "recipient": recipient, "subject": subject, "body": body})
        logger.warning("[OTP EMAIL MOCK] sender=%s recipient=%s subject=%s body=%s", sender, recipient, subject, body)
        return {
            "provider": "mock_email",
            "status": "accepted",
            "message": "Email provider response mocked",
            "sent": False,
            "mocked": True,
        }


class DummySmsChannel:
    def __init__(self, *, fail_with: str | None = None):
        self.fail_with = fail_with
        self.outbox: list[dict[str, str]] = []

    def send(self, recipient: str, body: str) -> dict[str, Any]:
        if self.fail_with:
            raise SmsDeliveryError(self.fail_with)
        self.outbox.append({"recipient": recipient, "body": body})
        logger.warning("[OTP SMS MOCK] recipient=%s body=%s", recipient, body)
        return {
            "provider": "mock_sms",
            "status": "accepted",
            "message": "SMS provider response mocked",
            "sent": False,
            "mocked": True,
        }
