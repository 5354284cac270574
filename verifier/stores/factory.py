from __future__ import annotations

import redis

from verifier.core.config import Settings, settings
from verifier.core.errors import ConfigurationError
from verifier.stores.base import Store
from verifier.stores.memory import InMemoryStore
from verifier.stores.redis_store import RedisStore


def store_backend(source: Settings | None = None) -> str:
    cfg = source or settings
    backend = str(cfg.STORE_BACKEND or "sql").strip().lower()
    if backend in {"", "sql", "postgres", "database"}:
        return "sql"
    if backend in {"memory", "inmemory"}:
        return "memory"
    return backend


def build_store(source: Settings | None = None) -> Store:
    cfg = source or settings
    backend = store_backend(cfg)
    if backend == "sql":
        # Importing the session binds the engine to DATABASE_URL, so only do it when needed.
        from verifier.db.session import SessionLocal
        from verifier.stores.sql import SqlAlchemyStore

        return SqlAlchemyStore(SessionLocal)
    if backend == "redis":
        client = redis.Redis.from_url(
            cfg.REDIS_URL,
            decode_responses=True,
            socket_timeout=2.0,
            socket_connect_timeout=2.0,
        )
        return RedisStore(
            client,
            key_prefix=cfg.REDIS_KEY_PREFIX,
            retention_seconds=cfg.REDIS_RETENTION_SECONDS,
        )
    if backend == "memory":
        return InMemoryStore()
    raise ConfigurationError(f"unknown STORE_BACKEND: {backend}")
