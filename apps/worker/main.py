"""
Celery worker entry point.

This imports the Celery app and tasks from the API module. The worker owns
its process lifecycle: database connections are released on shutdown.
"""
import logging
import sys
import os

# Add API directory to path so we can import tasks
sys.path.insert(0, os.environ.get("API_PATH", "/api"))

from celery.signals import worker_process_init, worker_shutdown  # noqa: E402

from core.logging import setup_logging  # noqa: E402
from tasks import celery_app  # noqa: E402

logger = logging.getLogger(__name__)

# This makes Celery discover tasks
celery_app.autodiscover_tasks(['tasks'])


@worker_process_init.connect
def init_worker_process(**kwargs):
    setup_logging()


@worker_shutdown.connect
def shutdown_worker(**kwargs):
    from core.database import engine

    engine.dispose()
    logger.info("Worker shut down, connection pool disposed")


@celery_app.task(name="worker.health_check")
def health_check():
    """Health check task"""
    return {"status": "ok"}
