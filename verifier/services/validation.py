from __future__ import annotations

import re

from verifier.core.errors import InvalidEmailError, InvalidMobileNumberError

_MOBILE_RE = re.compile(r"^\+?[0-9]{7,24}$")


def validate_email(address: str) -> None:
    """Offline syntactic check, intentionally far looser than RFC 5322."""
    parts = str(address or "").split("@")
    if len(parts) != 2:
        raise InvalidEmailError("invalid email address: expected exactly one '@'")
    if len(parts[1].split(".")) < 2:
        raise InvalidEmailError("invalid email address: domain needs at least two labels")


def validate_mobile(number: str) -> None:
    # No normalization: spaces, dashes and brackets are rejected as-is.
    if not _MOBILE_RE.fullmatch(str(number or "")):
        raise InvalidMobileNumberError("invalid mobile number: expected optional '+' and 7-24 digits")
