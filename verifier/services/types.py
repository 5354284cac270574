from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


class Channel(str, Enum):
    EMAIL = "email"
    MOBILE = "mobile"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    EXPIRED = "expired"
    REJECTED = "rejected"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"


TERMINAL_STATUSES = frozenset(
    {
        VerificationStatus.VERIFIED,
        VerificationStatus.EXPIRED,
        VerificationStatus.REJECTED,
        VerificationStatus.ATTEMPTS_EXCEEDED,
    }
)

DISPATCH_QUEUED = "queued"
DISPATCH_FAILED = "failed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)


@dataclass(frozen=True)
class Queued:
    """The provider accepted the message; ``ack`` is whatever it returned."""

    ack: Any = None
    status = DISPATCH_QUEUED

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "data": {"status": _json_safe(self.ack)}}


@dataclass(frozen=True)
class Failed:
    reason: str = ""
    status = DISPATCH_FAILED

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "data": {"error": self.reason}}


DispatchEntry = Union[Queued, Failed]


def dispatch_entry_from_dict(raw: dict[str, Any]) -> DispatchEntry:
    status = str(raw.get("status") or "").strip().lower()
    data = raw.get("data") or {}
    if status == DISPATCH_QUEUED:
        return Queued(ack=data.get("status"))
    if status == DISPATCH_FAILED:
        return Failed(reason=str(data.get("error") or ""))
    raise ValueError(f"unknown dispatch status: {status!r}")


def _parse_dt(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return as_utc(raw)
    return as_utc(datetime.fromisoformat(str(raw)))


def _format_dt(value: datetime | None) -> str | None:
    if value is None:
        return None
    return as_utc(value).isoformat()


@dataclass
class VerificationRequest:
    id: str
    channel: Channel
    recipient: str
    secret: str
    secret_expiry: datetime
    sender: str = ""
    attempts: int = 0
    dispatch_log: list[DispatchEntry] = field(default_factory=list)
    status: VerificationStatus = VerificationStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def record_dispatch(self, ack: Any = None, error: BaseException | None = None) -> DispatchEntry:
        entry: DispatchEntry
        if error is not None:
            entry = Failed(reason=str(error))
        else:
            entry = Queued(ack=ack)
        self.dispatch_log.append(entry)
        return entry

    def copy(self) -> "VerificationRequest":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "channel": self.channel.value,
            "sender": self.sender,
            "recipient": self.recipient,
            "secret": self.secret,
            "secret_expiry": _format_dt(self.secret_expiry),
            "attempts": int(self.attempts),
            "dispatch_log": [entry.to_dict() for entry in self.dispatch_log],
            "status": self.status.value,
            "created_at": _format_dt(self.created_at),
            "updated_at": _format_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "VerificationRequest":
        return cls(
            id=str(raw["id"]),
            channel=Channel(raw["channel"]),
            sender=str(raw.get("sender") or ""),
            recipient=str(raw["recipient"]),
            secret=str(raw["secret"]),
            secret_expiry=_parse_dt(raw["secret_expiry"]),
            attempts=int(raw.get("attempts") or 0),
            dispatch_log=[dispatch_entry_from_dict(item) for item in (raw.get("dispatch_log") or [])],
            status=VerificationStatus(raw.get("status") or VerificationStatus.PENDING.value),
            created_at=_parse_dt(raw.get("created_at")),
            updated_at=_parse_dt(raw.get("updated_at")),
        )
