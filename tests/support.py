import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")

import redis

from verifier.channels.dummy import DummyEmailChannel, DummySmsChannel
from verifier.core.config import VerifierConfig
from verifier.services.verification import Verifier

CALLBACK_URL = "https://example.com/verify"
SENDER = "noreply@example.com"


class FrozenClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeRedis:
    """Just enough of redis.Redis for RedisStore: strings with ex/nx and lists."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.expiry: dict[str, int] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("redis is down")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value, ex=None, nx=False):
        self._check()
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.expiry[key] = ex
        return True

    def delete(self, key):
        self.data.pop(key, None)
        self.lists.pop(key, None)
        self.expiry.pop(key, None)

    def rpush(self, key, *values):
        self._check()
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    def lrange(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        return list(items[start:] if end == -1 else items[start : end + 1])

    def lrem(self, key, count, value):
        self._check()
        items = self.lists.get(key, [])
        kept = [item for item in items if item != value]
        self.lists[key] = kept
        return len(items) - len(kept)

    def expire(self, key, seconds):
        self._check()
        self.expiry[key] = seconds
        return True


def make_verifier(store, *, clock=None, email_channel=None, mobile_channel=None, **overrides):
    options = {"default_email_sender": SENDER, "email_callback_url": CALLBACK_URL}
    options.update(overrides)
    cfg = VerifierConfig(**options)
    return Verifier(
        cfg,
        store,
        email_channel if email_channel is not None else DummyEmailChannel(),
        mobile_channel if mobile_channel is not None else DummySmsChannel(),
        clock=clock or FrozenClock(),
    )
