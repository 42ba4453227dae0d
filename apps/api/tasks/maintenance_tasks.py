"""
Scheduled maintenance tasks.

The idempotency log only needs to outlive the redelivery window of the
event bus, so rows older than HANDLER_LOG_RETENTION_DAYS are pruned daily.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from core.config import settings
from core.database import SessionLocal
from core.unit_of_work import UnitOfWork
from repositories import HandlerLogRepository
from tasks import celery_app

logger = logging.getLogger(__name__)


def prune_handler_logs(uow: UnitOfWork, retention_days: int, now: Optional[datetime] = None) -> int:
    """Delete handler log rows older than ``retention_days``. Returns the count."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=retention_days)
    handler_logs = HandlerLogRepository(uow)
    return uow.do(lambda: handler_logs.prune_older_than(cutoff))


@celery_app.task(name="tasks.prune_handler_logs")
def prune_handler_logs_task() -> Dict:
    retention_days = settings.HANDLER_LOG_RETENTION_DAYS
    try:
        deleted = prune_handler_logs(UnitOfWork(SessionLocal), retention_days)
    except Exception as e:
        logger.error(f"Handler log pruning failed: {e}", exc_info=True)
        raise
    return {"status": "success", "deleted": deleted, "retention_days": retention_days}
