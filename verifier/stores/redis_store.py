from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import Callable

import redis

from verifier.core.errors import NotFoundError, StoreError, TerminalStatusError
from verifier.services.types import Channel, VerificationRequest, VerificationStatus, as_utc, utcnow

logger = logging.getLogger(__name__)


class RedisStore:
    """Redis-backed store with one JSON record per request.

    Records live under ``{prefix}:request:{id}``; a list under
    ``{prefix}:{channel}:{recipient}`` holds the ids in creation order.
    Each record expires ``retention_seconds`` after its secret does, so
    expired requests remain readable for a while and can still be marked
    as such.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        key_prefix: str = "verifier",
        retention_seconds: int = 86400,
        clock: Callable[[], datetime] | None = None,
    ):
        self.client = client
        self.key_prefix = str(key_prefix or "verifier").strip(":")
        self.retention_seconds = max(int(retention_seconds), 0)
        self._clock = clock or utcnow

    def _record_key(self, request_id: str) -> str:
        return f"{self.key_prefix}:request:{request_id}"

    def _index_key(self, channel: Channel, recipient: str) -> str:
        return f"{self.key_prefix}:{Channel(channel).value}:{recipient}"

    def _ttl_seconds(self, request: VerificationRequest) -> int:
        remaining = (as_utc(request.secret_expiry) - as_utc(self._clock())).total_seconds()
        return max(max(int(remaining), 0) + self.retention_seconds, 1)

    def _load(self, request_id: str) -> VerificationRequest | None:
        key = self._record_key(request_id)
        try:
            raw = self.client.get(key)
        except redis.RedisError as exc:
            raise StoreError(f"failed to read verification request: {exc}") from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return VerificationRequest.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreError(f"corrupt verification request under {key}") from exc

    def _write(self, request: VerificationRequest, *, only_new: bool = False) -> None:
        payload = json.dumps(request.to_dict(), separators=(",", ":"))
        try:
            written = self.client.set(
                self._record_key(request.id),
                payload,
                ex=self._ttl_seconds(request),
                nx=only_new,
            )
        except redis.RedisError as exc:
            logger.error("verification request write failed id=%s", request.id, exc_info=True)
            raise StoreError(f"failed to write verification request: {exc}") from exc
        if only_new and not written:
            raise StoreError(f"verification request {request.id} already exists")

    def create(self, request: VerificationRequest) -> VerificationRequest:
        row = request.copy()
        if not row.id:
            row.id = uuid.uuid4().hex
        self._write(row, only_new=True)
        index_key = self._index_key(row.channel, row.recipient)
        try:
            self.client.rpush(index_key, row.id)
            # The newest record always outlives the older ones it is listed with.
            self.client.expire(index_key, self._ttl_seconds(row))
        except redis.RedisError as exc:
            logger.error("verification index write failed id=%s", row.id, exc_info=True)
            raise StoreError(f"failed to index verification request: {exc}") from exc
        return row

    def read_last_pending(self, channel: Channel, recipient: str) -> VerificationRequest:
        channel = Channel(channel)
        index_key = self._index_key(channel, recipient)
        try:
            ids = self.client.lrange(index_key, 0, -1)
        except redis.RedisError as exc:
            raise StoreError(f"failed to read pending verification request: {exc}") from exc

        for raw_id in reversed(ids or []):
            request_id = raw_id.decode("utf-8") if isinstance(raw_id, bytes) else str(raw_id)
            found = self._load(request_id)
            if found is None:
                # Record expired out of redis; drop the dangling id.
                try:
                    self.client.lrem(index_key, 0, request_id)
                except redis.RedisError:
                    logger.warning("failed to prune expired id=%s from %s", request_id, index_key)
                continue
            if found.status is VerificationStatus.PENDING:
                return found
        raise NotFoundError(f"no pending {channel.value} verification for recipient")

    def update(self, request_id: str, request: VerificationRequest) -> VerificationRequest:
        row = request.copy()
        row.id = request_id
        existing = self._load(request_id)
        if existing is None:
            raise StoreError(f"verification request {request_id} does not exist")
        if existing.is_terminal:
            raise TerminalStatusError(f"verification request {request_id} is already {existing.status.value}")
        self._write(row)
        return row
