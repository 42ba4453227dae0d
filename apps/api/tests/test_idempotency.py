"""
At-most-once handler execution backed by the handler log.
"""
import pytest

from core.exceptions import InfrastructureError
from models import HandlerLog
from repositories import handler_log_repository
from services.workout import try_process


def _log_rows(uow):
    return uow.do(lambda: uow.session.query(HandlerLog).count())


class TestTryProcess:
    def test_action_runs_once_per_key(self, uow):
        calls = []

        first = try_process(uow, "workout.summary", "workout.completed", "evt-1", lambda: calls.append(1))
        second = try_process(uow, "workout.summary", "workout.completed", "evt-1", lambda: calls.append(2))

        assert first is True
        assert second is False
        assert calls == [1]
        assert _log_rows(uow) == 1

    def test_distinct_keys_run_independently(self, uow):
        calls = []

        try_process(uow, "workout.summary", "workout.completed", "evt-1", lambda: calls.append("a"))
        try_process(uow, "workout.summary", "workout.completed", "evt-2", lambda: calls.append("b"))
        try_process(uow, "other.handler", "workout.completed", "evt-1", lambda: calls.append("c"))

        assert calls == ["a", "b", "c"]
        assert _log_rows(uow) == 3

    def test_failed_action_leaves_no_log_row(self, uow):
        def failing():
            raise RuntimeError("summary failed")

        with pytest.raises(RuntimeError):
            try_process(uow, "workout.summary", "workout.completed", "evt-1", failing)
        assert _log_rows(uow) == 0

        calls = []
        assert try_process(uow, "workout.summary", "workout.completed", "evt-1", lambda: calls.append(1)) is True
        assert calls == [1]

    def test_unsupported_dialect_is_an_infrastructure_error(self, uow, monkeypatch):
        monkeypatch.setattr(handler_log_repository, "_INSERTS", {})
        calls = []

        with pytest.raises(InfrastructureError):
            try_process(uow, "workout.summary", "workout.completed", "evt-9", lambda: calls.append(1))

        assert calls == []
