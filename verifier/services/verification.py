from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Any, Callable

from verifier.channels.base import EmailChannel, MobileChannel
from verifier.core.config import VerifierConfig
from verifier.core.errors import (
    ConfigurationError,
    DispatchError,
    EmptyEmailBodyError,
    EmptyMobileBodyError,
    InvalidSecretError,
    MaximumAttemptsExceededError,
    SecretExpiredError,
    TerminalStatusError,
    VerificationError,
)
from verifier.services.messages import (
    build_email_body,
    build_sms_body,
    email_callback_url,
    resolve_email_subject,
)
from verifier.services.secret_generator import SecretGenerator
from verifier.services.types import Channel, VerificationRequest, VerificationStatus, as_utc, utcnow
from verifier.services.validation import validate_email, validate_mobile
from verifier.stores.base import Store

logger = logging.getLogger(__name__)

_OUTCOME_ERRORS: dict[VerificationStatus, type[VerificationError]] = {
    VerificationStatus.ATTEMPTS_EXCEEDED: MaximumAttemptsExceededError,
    VerificationStatus.EXPIRED: SecretExpiredError,
    VerificationStatus.REJECTED: InvalidSecretError,
}

_OUTCOME_MESSAGES = {
    VerificationStatus.ATTEMPTS_EXCEEDED: "maximum attempts exceeded",
    VerificationStatus.EXPIRED: "verification secret expired",
    VerificationStatus.REJECTED: "invalid verification secret",
}


def evaluate_attempt(
    request: VerificationRequest,
    secret: str,
    *,
    now: datetime,
    max_attempts: int,
) -> VerificationStatus:
    """Status a pending request moves to after one verification attempt.

    ``request.attempts`` must already include the current attempt. The order
    of the checks decides which error the caller sees.
    """
    if request.attempts > max_attempts:
        return VerificationStatus.ATTEMPTS_EXCEEDED
    if as_utc(request.secret_expiry) < as_utc(now):
        return VerificationStatus.EXPIRED
    if not secrets.compare_digest(str(secret or "").encode("utf-8"), request.secret.encode("utf-8")):
        return VerificationStatus.REJECTED
    return VerificationStatus.VERIFIED


class Verifier:
    """Issues, dispatches and validates verification secrets.

    The instance holds no mutable state of its own; everything lives in the
    injected store, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        config: VerifierConfig,
        store: Store,
        email_channel: EmailChannel | None = None,
        mobile_channel: MobileChannel | None = None,
        *,
        generator: SecretGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.cfg = config
        self.store = store
        self.email_channel = email_channel
        self.mobile_channel = mobile_channel
        self.generator = generator or SecretGenerator()
        self._clock = clock or utcnow

    def _now(self) -> datetime:
        return as_utc(self._clock())

    def _save(self, request: VerificationRequest) -> VerificationRequest:
        request.updated_at = self._now()
        return self.store.update(request.id, request)

    def email_callback_url(self, email: str, secret: str) -> str:
        base_url = str(self.cfg.email_callback_url or "").strip()
        if not base_url:
            raise ConfigurationError("email callback URL is not configured")
        return email_callback_url(base_url, email, secret)

    def new_request(self, channel: Channel | str, recipient: str) -> VerificationRequest:
        channel = Channel(channel)
        if channel is Channel.EMAIL:
            validate_email(recipient)
            secret = self.generator.email_secret()
            ttl = self.cfg.email_otp_ttl
            sender = self.cfg.default_email_sender
        else:
            validate_mobile(recipient)
            secret = self.generator.mobile_secret()
            ttl = self.cfg.mobile_otp_ttl
            sender = ""

        now = self._now()
        request = VerificationRequest(
            id=self.generator.request_id(),
            channel=channel,
            sender=sender,
            recipient=recipient,
            secret=secret,
            secret_expiry=now + ttl,
            status=VerificationStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        stored = self.store.create(request)
        logger.info("verification request created id=%s channel=%s", stored.id, channel.value)
        return stored

    def dispatch(
        self,
        request: VerificationRequest,
        *,
        body: str,
        subject: str | None = None,
    ) -> VerificationRequest:
        """Send the request's payload and record the outcome in its dispatch log.

        The record is persisted whether or not the provider accepted the
        message. A failed send leaves the request pending and is re-raised as
        ``DispatchError`` after the log entry is stored.
        """
        if request.is_terminal:
            raise TerminalStatusError(f"request {request.id} is already {request.status.value}")

        payload = str(body or "").strip()
        send: Callable[[], Any]
        if request.channel is Channel.EMAIL:
            if not payload:
                raise EmptyEmailBodyError("email body is required")
            channel = self.email_channel
            if channel is None:
                raise ConfigurationError("no email channel configured")
            sender = request.sender or self.cfg.default_email_sender
            resolved_subject = resolve_email_subject(subject, self.cfg.default_email_subject)

            def send():
                return channel.send(sender, request.recipient, resolved_subject, payload)

        else:
            if not payload:
                raise EmptyMobileBodyError("SMS body is required")
            mobile = self.mobile_channel
            if mobile is None:
                raise ConfigurationError("no mobile channel configured")

            def send():
                return mobile.send(request.recipient, payload)

        send_error: Exception | None = None
        try:
            ack = send()
        except Exception as exc:
            send_error = exc
            request.record_dispatch(error=exc)
            logger.warning(
                "dispatch failed id=%s channel=%s error=%s",
                request.id,
                request.channel.value,
                exc,
            )
        else:
            request.record_dispatch(ack=ack)

        stored = self._save(request)

        if send_error is not None:
            if isinstance(send_error, DispatchError):
                raise send_error
            raise DispatchError(f"{request.channel.value} dispatch failed: {send_error}") from send_error
        return stored

    def new_email_with_request(
        self,
        request: VerificationRequest,
        subject: str | None,
        body: str,
    ) -> VerificationRequest:
        if request.channel is not Channel.EMAIL:
            raise ValueError(f"request {request.id} is not an email verification")
        return self.dispatch(request, body=body, subject=subject)

    def new_mobile_with_request(self, request: VerificationRequest, body: str) -> VerificationRequest:
        if request.channel is not Channel.MOBILE:
            raise ValueError(f"request {request.id} is not a mobile verification")
        return self.dispatch(request, body=body)

    def new_email(self, recipient: str, subject: str | None = "") -> VerificationRequest:
        if not str(self.cfg.email_callback_url or "").strip():
            raise ConfigurationError("email callback URL is not configured")
        request = self.new_request(Channel.EMAIL, recipient)
        body = build_email_body(
            callback_url=self.email_callback_url(request.recipient, request.secret),
            ttl=self.cfg.email_otp_ttl,
            template=self.cfg.email_template,
        )
        return self.dispatch(request, body=body, subject=subject)

    def new_mobile(self, recipient: str) -> VerificationRequest:
        request = self.new_request(Channel.MOBILE, recipient)
        body = build_sms_body(
            secret=request.secret,
            ttl=self.cfg.mobile_otp_ttl,
            template=self.cfg.sms_template,
        )
        return self.dispatch(request, body=body)

    def verify_secret(self, channel: Channel | str, recipient: str, secret: str) -> VerificationRequest:
        channel = Channel(channel)
        request = self.store.read_last_pending(channel, recipient)
        if request.is_terminal:
            raise TerminalStatusError(f"request {request.id} is already {request.status.value}")

        request.attempts += 1
        outcome = evaluate_attempt(
            request,
            secret,
            now=self._now(),
            max_attempts=self.cfg.max_verify_attempts,
        )
        # A wrong secret is reported as rejected but keeps the request open;
        # repeated misses end in attempts_exceeded once the limit is passed.
        if outcome is not VerificationStatus.REJECTED:
            request.status = outcome
        stored = self._save(request)
        logger.info(
            "verification attempt id=%s channel=%s attempts=%s outcome=%s",
            request.id,
            channel.value,
            request.attempts,
            outcome.value,
        )

        error_cls = _OUTCOME_ERRORS.get(outcome)
        if error_cls is not None:
            raise error_cls(_OUTCOME_MESSAGES[outcome])
        return stored

    def verify_email_secret(self, recipient: str, secret: str) -> VerificationRequest:
        return self.verify_secret(Channel.EMAIL, recipient, secret)

    def verify_mobile_secret(self, recipient: str, secret: str) -> VerificationRequest:
        return self.verify_secret(Channel.MOBILE, recipient, secret)
