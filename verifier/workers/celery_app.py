from celery import Celery
from verifier.core.config import settings

celery_app = Celery(
    "otp_verifier",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["verifier.workers.tasks.cleanup"],
)

celery_app.conf.beat_schedule = {
    "cleanup_stale_requests": {
        "task": "verifier.workers.tasks.cleanup.cleanup_stale_requests",
        "schedule": 3600.0,
    },
}
celery_app.conf.timezone = "UTC"
