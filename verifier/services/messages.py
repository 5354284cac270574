from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_SUBJECT_FALLBACK = "Verify your email address"

DEFAULT_EMAIL_OTP_PAYLOAD = """
    <html style="background: #fefefe; font-size: 14px; font-family: sans-serif; color: #333;">
    <body style="max-width: 780px; margin: 0 auto; padding: 2rem;">
        <div>Hello,</div>
        <p>
        Please click
        <a href="{callback_url}" style="font-weight: 700; text-decoration: underline">here</a>
        to verify your email.
        </p>

        <h5>Note: This link is valid only for {validity}.</h5>
        <p style="margin-top: 3rem; color: #999; font-size: 0.75rem;">
            <em>
                Disclaimer: This is a system generated email, please do not reply to
                this address.
            </em>
        </p>
    </body></html>
    """

DEFAULT_SMS_OTP_PAYLOAD = "{secret} is the OTP to verify your mobile number. It is valid only for {validity}."


def email_callback_url(base_url: str, email: str, secret: str) -> str:
    """Append ``email`` and ``secret`` to ``base_url``.

    Existing query parameters are kept; keys are emitted in lexicographic
    order so the same inputs always yield the same URL.
    """
    parts = urlsplit(str(base_url or "").strip())
    params = parse_qsl(parts.query, keep_blank_values=True)
    params.append(("email", email))
    params.append(("secret", secret))
    params.sort(key=lambda item: item[0])
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_ttl(ttl: timedelta) -> str:
    total = max(int(ttl.total_seconds()), 0)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    chunks = []
    if days:
        chunks.append(_plural(days, "day"))
    if hours:
        chunks.append(_plural(hours, "hour"))
    if minutes:
        chunks.append(_plural(minutes, "minute"))
    if seconds or not chunks:
        chunks.append(_plural(seconds, "second"))
    return " ".join(chunks)


def resolve_email_subject(subject: str | None, default_subject: str | None) -> str:
    requested = str(subject or "").strip()
    if requested:
        return requested
    configured = str(default_subject or "").strip()
    if configured:
        return configured
    return DEFAULT_EMAIL_SUBJECT_FALLBACK


def _render(template: str | None, fallback: str, **values: str) -> str:
    chosen = str(template or "").strip() or fallback
    try:
        return chosen.format(**values)
    except (KeyError, IndexError, ValueError):
        logger.warning("OTP template could not be rendered, using the built-in one")
        return fallback.format(**values)


def build_email_body(*, callback_url: str, ttl: timedelta, template: str | None = None) -> str:
    return _render(template, DEFAULT_EMAIL_OTP_PAYLOAD, callback_url=callback_url, validity=format_ttl(ttl))


def build_sms_body(*, secret: str, ttl: timedelta, template: str | None = None) -> str:
    return _render(template, DEFAULT_SMS_OTP_PAYLOAD, secret=secret, validity=format_ttl(ttl))
