"""
Scheduled pruning of the handler log.
"""
from datetime import datetime, timezone

from models import HandlerLog
from tasks.maintenance_tasks import prune_handler_logs


def _insert_log(uow, key, created_at):
    def run():
        uow.session.add(
            HandlerLog(handler_name="workout.summary", event_type="workout.completed", entity_key=key, created_at=created_at)
        )
        uow.session.flush()

    uow.do(run)


def _remaining_keys(uow):
    return uow.do(lambda: sorted(row.entity_key for row in uow.session.query(HandlerLog).all()))


class TestPruneHandlerLogs:
    def test_deletes_rows_past_retention(self, uow):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        _insert_log(uow, "old", datetime(2026, 1, 1, tzinfo=timezone.utc))
        _insert_log(uow, "recent", datetime(2026, 2, 20, tzinfo=timezone.utc))

        deleted = prune_handler_logs(uow, retention_days=30, now=now)

        assert deleted == 1
        assert _remaining_keys(uow) == ["recent"]

    def test_nothing_to_prune(self, uow):
        assert prune_handler_logs(uow, retention_days=30, now=datetime(2026, 3, 1, tzinfo=timezone.utc)) == 0
