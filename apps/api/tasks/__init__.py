"""
Celery application for scheduled maintenance.

The API never enqueues work from request handlers; the worker runs the
beat schedule only. Logging is configured by core.logging in the worker
process, so Celery does not take over the root logger.
"""
from celery import Celery
from core.config import settings
from celerybeat_schedule import beat_schedule

celery_app = Celery(
    "liftlog",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 3600,
    timezone="UTC",
    enable_utc=True,
    # Maintenance tasks are idempotent; redelivery after a crash is safe
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    worker_hijack_root_logger=False,
    task_time_limit=10 * 60,
    task_soft_time_limit=9 * 60,
    beat_schedule=beat_schedule,
)

from . import maintenance_tasks  # noqa: E402

__all__ = ["celery_app"]
