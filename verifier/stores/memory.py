from __future__ import annotations

import uuid
from datetime import datetime
from threading import Lock

from verifier.core.errors import NotFoundError, StoreError, TerminalStatusError
from verifier.services.types import Channel, VerificationRequest, VerificationStatus, as_utc


class InMemoryStore:
    """Process-local store, used for tests and single-process development.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self):
        self._rows: dict[str, VerificationRequest] = {}
        self._order: list[str] = []
        self._lock = Lock()

    def create(self, request: VerificationRequest) -> VerificationRequest:
        row = request.copy()
        if not row.id:
            row.id = uuid.uuid4().hex
        with self._lock:
            if row.id in self._rows:
                raise StoreError(f"verification request {row.id} already exists")
            self._rows[row.id] = row
            self._order.append(row.id)
        return row.copy()

    def read_last_pending(self, channel: Channel, recipient: str) -> VerificationRequest:
        channel = Channel(channel)
        with self._lock:
            for request_id in reversed(self._order):
                row = self._rows[request_id]
                if (
                    row.channel is channel
                    and row.recipient == recipient
                    and row.status is VerificationStatus.PENDING
                ):
                    return row.copy()
        raise NotFoundError(f"no pending {channel.value} verification for recipient")

    def update(self, request_id: str, request: VerificationRequest) -> VerificationRequest:
        row = request.copy()
        row.id = request_id
        with self._lock:
            existing = self._rows.get(request_id)
            if existing is None:
                raise StoreError(f"verification request {request_id} does not exist")
            if existing.is_terminal:
                raise TerminalStatusError(
                    f"verification request {request_id} is already {existing.status.value}"
                )
            self._rows[request_id] = row
        return row.copy()

    def get(self, request_id: str) -> VerificationRequest | None:
        with self._lock:
            row = self._rows.get(request_id)
            return row.copy() if row is not None else None

    def purge_older_than(self, cutoff: datetime) -> int:
        cutoff = as_utc(cutoff)
        with self._lock:
            stale = [
                request_id
                for request_id, row in self._rows.items()
                if row.updated_at is not None and as_utc(row.updated_at) < cutoff
            ]
            for request_id in stale:
                del self._rows[request_id]
            self._order = [request_id for request_id in self._order if request_id in self._rows]
        return len(stale)
