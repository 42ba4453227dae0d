"""
Unit of work: transaction propagation, error mapping and post-commit events.
"""
import pytest
from sqlalchemy import text

from core.exceptions import (
    ConflictError,
    InfrastructureError,
    NestedTransactionError,
    PreconditionError,
)
from core.unit_of_work import UnitOfWork
from models import MuscleGroup


@pytest.fixture
def published():
    return []


@pytest.fixture
def bare_uow(session_factory, published):
    return UnitOfWork(session_factory, publish=lambda *events: published.extend(events))


def _count_muscle_groups(uow):
    return uow.do(lambda: uow.session.query(MuscleGroup).count())


class TestTransactionScope:
    def test_do_commits_and_returns_result(self, bare_uow):
        def run():
            bare_uow.session.add(MuscleGroup(name="Back"))
            bare_uow.session.flush()
            return "ok"

        assert bare_uow.do(run) == "ok"
        assert _count_muscle_groups(bare_uow) == 1

    def test_nested_do_is_rejected(self, bare_uow):
        with pytest.raises(NestedTransactionError):
            bare_uow.do(lambda: bare_uow.do(lambda: None))

    def test_nested_do_rolls_back_outer_writes(self, bare_uow):
        def run():
            bare_uow.session.add(MuscleGroup(name="Legs"))
            bare_uow.session.flush()
            bare_uow.do(lambda: None)

        with pytest.raises(NestedTransactionError):
            bare_uow.do(run)
        assert _count_muscle_groups(bare_uow) == 0

    def test_do_if_not_in_tx_joins_open_transaction(self, bare_uow):
        def run():
            outer = bare_uow.session
            inner = bare_uow.do_if_not_in_tx(lambda: bare_uow.session)
            return outer is inner

        assert bare_uow.do(run) is True

    def test_do_if_not_in_tx_opens_transaction_when_idle(self, bare_uow):
        assert bare_uow.in_transaction() is False
        assert bare_uow.do_if_not_in_tx(bare_uow.in_transaction) is True
        assert bare_uow.in_transaction() is False

    def test_session_outside_transaction_is_an_error(self, bare_uow):
        with pytest.raises(PreconditionError):
            bare_uow.session

    def test_accumulate_outside_transaction_is_an_error(self, bare_uow):
        with pytest.raises(PreconditionError):
            bare_uow.accumulate(["event"])


class TestErrorMapping:
    def test_exception_rolls_back_writes(self, bare_uow):
        def run():
            bare_uow.session.add(MuscleGroup(name="Arms"))
            bare_uow.session.flush()
            raise ValueError("boom")

        with pytest.raises(ValueError):
            bare_uow.do(run)
        assert _count_muscle_groups(bare_uow) == 0

    def test_integrity_error_becomes_conflict(self, bare_uow):
        def run():
            bare_uow.session.add(MuscleGroup(name="Core"))
            bare_uow.session.add(MuscleGroup(name="Core"))
            bare_uow.session.flush()

        with pytest.raises(ConflictError) as exc_info:
            bare_uow.do(run)
        assert exc_info.value.status_code == 409
        assert _count_muscle_groups(bare_uow) == 0

    def test_other_database_errors_become_infrastructure_errors(self, bare_uow):
        with pytest.raises(InfrastructureError) as exc_info:
            bare_uow.do(lambda: bare_uow.session.execute(text("SELECT * FROM no_such_table")))
        assert exc_info.value.status_code == 500


class TestPostCommitEvents:
    def test_events_published_after_commit(self, bare_uow, published):
        seen_inside = []

        def run():
            bare_uow.accumulate(["first", "second"])
            seen_inside.extend(published)

        bare_uow.do(run)
        assert seen_inside == []
        assert published == ["first", "second"]

    def test_rollback_discards_events(self, bare_uow, published):
        def run():
            bare_uow.accumulate(["lost"])
            raise ValueError("boom")

        with pytest.raises(ValueError):
            bare_uow.do(run)
        assert published == []

    def test_joined_transaction_publishes_once_at_outer_commit(self, bare_uow, published):
        def run():
            bare_uow.do_if_not_in_tx(lambda: bare_uow.accumulate(["inner"]))
            assert published == []

        bare_uow.do(run)
        assert published == ["inner"]
