"""
At-most-once execution for async event handlers.

``try_process`` inserts (handler, event_type, entity_key) into the handler
log with ON CONFLICT DO NOTHING and runs the action only when that insert
won. The insert and the action share one transaction: if the action fails
the log row is rolled back too, so a redelivery can try again.
"""
import logging
from typing import Callable

from core.unit_of_work import UnitOfWork
from repositories import HandlerLogRepository

logger = logging.getLogger(__name__)


def try_process(
    uow: UnitOfWork,
    handler_name: str,
    event_type: str,
    entity_key: str,
    action: Callable[[], None],
) -> bool:
    """
    Run ``action`` once per (handler_name, event_type, entity_key).

    Returns True when the action ran, False for a duplicate delivery.
    """
    handler_logs = HandlerLogRepository(uow)

    def run() -> bool:
        if not handler_logs.try_insert(handler_name, event_type, entity_key):
            logger.info(
                f"Skipping duplicate delivery of {event_type} to {handler_name}",
                extra={
                    "extra_fields": {
                        "handler": handler_name,
                        "event_type": event_type,
                        "entity_key": entity_key,
                    }
                },
            )
            return False
        action()
        return True

    return uow.do(run)
