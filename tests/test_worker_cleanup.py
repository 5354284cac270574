import os
import unittest
from datetime import timedelta
from unittest.mock import patch

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")

from verifier.services.types import Channel, VerificationRequest, utcnow
from verifier.stores.memory import InMemoryStore
from verifier.workers.celery_app import celery_app
from verifier.workers.tasks import cleanup as cleanup_task


def _request(request_id, updated_at):
    return VerificationRequest(
        id=request_id,
        channel=Channel.MOBILE,
        recipient="+919876543210",
        secret="123456",
        secret_expiry=updated_at + timedelta(minutes=10),
        created_at=updated_at,
        updated_at=updated_at,
    )


class CleanupTaskTests(unittest.TestCase):
    def test_purges_requests_past_retention(self):
        store = InMemoryStore()
        now = utcnow()
        store.create(_request("stale", now - timedelta(days=45)))
        store.create(_request("recent", now - timedelta(days=1)))

        with (
            patch.object(cleanup_task, "store_backend", return_value="memory"),
            patch.object(cleanup_task, "build_store", return_value=store),
            patch.object(cleanup_task.settings, "VERIFICATION_RETENTION_DAYS", 30),
        ):
            result = cleanup_task.cleanup_stale_requests()

        self.assertEqual(result, {"backend": "memory", "deleted": 1, "skipped": False})
        self.assertIsNone(store.get("stale"))
        self.assertIsNotNone(store.get("recent"))

    def test_redis_backend_is_skipped(self):
        with (
            patch.object(cleanup_task, "store_backend", return_value="redis"),
            patch.object(cleanup_task, "build_store") as build_store,
        ):
            result = cleanup_task.cleanup_stale_requests()
        self.assertTrue(result["skipped"])
        build_store.assert_not_called()

    def test_task_is_scheduled(self):
        schedule = celery_app.conf.beat_schedule["cleanup_stale_requests"]
        self.assertEqual(schedule["task"], cleanup_task.cleanup_stale_requests.name)


if __name__ == "__main__":
    unittest.main()
