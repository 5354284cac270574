from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from verifier.core.deps import get_verifier
from verifier.core.http_hardening import current_request_id
from verifier.core.errors import (
    ConfigurationError,
    DispatchError,
    EmptyBodyError,
    InvalidEmailError,
    InvalidMobileNumberError,
    InvalidSecretError,
    MaximumAttemptsExceededError,
    NotFoundError,
    SecretExpiredError,
    StoreError,
    TerminalStatusError,
    VerificationError,
)
from verifier.schemas.verification import (
    EmailVerificationSend,
    MobileVerificationSend,
    SecretVerified,
    SecretVerify,
    VerificationSent,
)
from verifier.services.types import Channel, VerificationRequest
from verifier.services.verification import Verifier

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[VerificationError], int], ...] = (
    (InvalidEmailError, 400),
    (InvalidMobileNumberError, 400),
    (EmptyBodyError, 400),
    (InvalidSecretError, 400),
    (NotFoundError, 404),
    (TerminalStatusError, 409),
    (SecretExpiredError, 410),
    (MaximumAttemptsExceededError, 429),
    (DispatchError, 502),
    (StoreError, 503),
    (ConfigurationError, 500),
)


def _http_error(exc: VerificationError) -> HTTPException:
    status_code = 500
    for error_cls, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            status_code = mapped
            break
    logger.info(
        "verification call failed status=%s error=%s request_id=%s",
        status_code,
        exc.__class__.__name__,
        current_request_id(),
    )
    if status_code == 500:
        return HTTPException(status_code=500, detail="verification failed")
    return HTTPException(status_code=status_code, detail=str(exc))


def _normalize_channel(raw: str | None) -> Channel:
    value = str(raw or "").strip().lower()
    if value in {"email", "mail"}:
        return Channel.EMAIL
    if value in {"mobile", "sms", "phone"}:
        return Channel.MOBILE
    raise HTTPException(status_code=400, detail="channel must be 'email' or 'mobile'")


def _sent(request: VerificationRequest) -> VerificationSent:
    return VerificationSent(
        channel=request.channel.value,
        request_id=request.id,
        expires_at=request.secret_expiry.isoformat(),
    )


def _verify(verifier: Verifier, channel: Channel, recipient: str, secret: str) -> SecretVerified:
    try:
        request = verifier.verify_secret(channel, recipient, secret)
    except VerificationError as exc:
        raise _http_error(exc) from exc
    return SecretVerified(channel=channel.value, request_id=request.id)


@router.post("/email", status_code=202, response_model=VerificationSent)
def send_email_verification(payload: EmailVerificationSend, verifier: Verifier = Depends(get_verifier)):
    try:
        request = verifier.new_email(payload.email.strip(), payload.subject or "")
    except VerificationError as exc:
        raise _http_error(exc) from exc
    return _sent(request)


@router.post("/mobile", status_code=202, response_model=VerificationSent)
def send_mobile_verification(payload: MobileVerificationSend, verifier: Verifier = Depends(get_verifier)):
    try:
        request = verifier.new_mobile(payload.mobile)
    except VerificationError as exc:
        raise _http_error(exc) from exc
    return _sent(request)


@router.post("/verify", response_model=SecretVerified)
def verify_secret(payload: SecretVerify, verifier: Verifier = Depends(get_verifier)):
    channel = _normalize_channel(payload.channel)
    return _verify(verifier, channel, payload.recipient, payload.secret)


@router.get("/email/callback", response_model=SecretVerified)
def email_callback(
    email: str = Query(min_length=3),
    secret: str = Query(min_length=1),
    verifier: Verifier = Depends(get_verifier),
):
    return _verify(verifier, Channel.EMAIL, email, secret)
