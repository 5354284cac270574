from __future__ import annotations

import logging
from datetime import timedelta

from verifier.core.config import settings
from verifier.services.types import utcnow
from verifier.stores.factory import build_store, store_backend
from verifier.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="verifier.workers.tasks.cleanup.cleanup_stale_requests")
def cleanup_stale_requests():
    backend = store_backend()
    if backend == "redis":
        # Redis records carry their own TTL.
        return {"backend": backend, "deleted": 0, "skipped": True}
    retention_days = max(int(settings.VERIFICATION_RETENTION_DAYS), 1)
    cutoff = utcnow() - timedelta(days=retention_days)
    store = build_store()
    deleted = store.purge_older_than(cutoff)
    logger.info("purged stale verification requests backend=%s deleted=%s cutoff=%s", backend, deleted, cutoff.isoformat())
    return {"backend": backend, "deleted": int(deleted), "skipped": False}
