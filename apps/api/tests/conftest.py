"""
Pytest configuration and fixtures

Every test gets its own database (in-memory SQLite unless TEST_DATABASE_URL
points at PostgreSQL), a schema created from the models, and a freshly
wired service container, so event registries never leak between tests.
"""
import pytest
import sys
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-workout-api-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "text")

from core.database import Base, build_engine, build_session_factory  # noqa: E402
from services.container import build_container  # noqa: E402
import models  # noqa: E402,F401

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")

USER_ID = 1
OTHER_USER_ID = 2


class FrozenClock:
    """Deterministic clock; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def db_engine():
    engine = build_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def container(session_factory, clock):
    return build_container(session_factory, clock=clock)


@pytest.fixture
def service(container):
    return container.workouts


@pytest.fixture
def catalog(container):
    return container.catalog


@pytest.fixture
def uow(container):
    return container.uow


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def muscle_group(catalog):
    return catalog.create_muscle_group("Chest")


@pytest.fixture
def bench_press(catalog, muscle_group):
    return catalog.create_exercise("Bench Press", muscle_group_id=muscle_group.id)


@pytest.fixture
def individual_exercise(service, user_id, bench_press):
    return service.get_or_create_individual_exercise(user_id, exercise_id=bench_press.id)


@pytest.fixture
def plan(service, user_id):
    return service.create_workout_plan(user_id, "Strength block", active=True)


@pytest.fixture
def tree(service, user_id, plan, individual_exercise):
    """
    One plan, its first cycle, one workout and one exercise with three sets.

    Returns a namespace of ids: plan, cycle, workout, we, sets, ie.
    """
    cycle_id = plan.current_cycle_id
    workout = service.create_workout(user_id, plan.id, cycle_id, "Push day")
    we = service.create_workout_exercise(user_id, plan.id, cycle_id, workout.id, individual_exercise.id, 3)
    return SimpleNamespace(
        plan=plan.id,
        cycle=cycle_id,
        workout=workout.id,
        we=we.id,
        sets=[s.id for s in we.workout_sets],
        ie=individual_exercise.id,
    )

