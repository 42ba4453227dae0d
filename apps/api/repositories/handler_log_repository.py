import logging
from datetime import datetime

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from core.exceptions import InfrastructureError
from models import HandlerLog
from repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class HandlerLogRepository(BaseRepository):
    model = HandlerLog
    resource = "Handler log"

    def try_insert(self, handler_name: str, event_type: str, entity_key: str) -> bool:
        """
        Record (handler, event, entity) unless it is already recorded.

        Returns True when this call inserted the row, False when another
        delivery got there first.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise InfrastructureError(f"handler log upsert is not supported on {dialect}")

        stmt = (
            insert(HandlerLog.__table__)
            .values(handler_name=handler_name, event_type=event_type, entity_key=entity_key)
            .on_conflict_do_nothing(index_elements=["handler_name", "event_type", "entity_key"])
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def prune_older_than(self, cutoff: datetime) -> int:
        deleted = (
            self.db.query(HandlerLog)
            .filter(HandlerLog.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        logger.info(
            f"Pruned {deleted} handler log rows",
            extra={"extra_fields": {"cutoff": cutoff.isoformat(), "deleted": deleted}},
        )
        return deleted
