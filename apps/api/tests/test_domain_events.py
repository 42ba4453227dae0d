"""
Domain event registries and the workout completion event.
"""
import logging
from datetime import datetime, timezone

import pytest

from core.events import DomainEventDispatcher, EventBus
from domain_events import EVENT_WORKOUT_COMPLETED, WorkoutCompleted
from models import Workout


def _completed(workout_id=1):
    return WorkoutCompleted(user_id=1, workout_id=workout_id)


class TestDomainEventDispatcher:
    def test_handlers_run_in_registration_order(self):
        dispatcher = DomainEventDispatcher()
        calls = []
        dispatcher.register(EVENT_WORKOUT_COMPLETED, lambda e: calls.append("a"))
        dispatcher.register(EVENT_WORKOUT_COMPLETED, lambda e: calls.append("b"))

        dispatcher.dispatch([_completed()])

        assert calls == ["a", "b"]

    def test_first_failure_stops_dispatch(self):
        dispatcher = DomainEventDispatcher()
        calls = []

        def failing(event):
            raise RuntimeError("handler failed")

        dispatcher.register(EVENT_WORKOUT_COMPLETED, failing)
        dispatcher.register(EVENT_WORKOUT_COMPLETED, lambda e: calls.append("after"))

        with pytest.raises(RuntimeError):
            dispatcher.dispatch([_completed()])
        assert calls == []

    def test_unregistered_event_type_is_ignored(self):
        dispatcher = DomainEventDispatcher()
        dispatcher.dispatch([_completed()])
        assert dispatcher.handlers_for(EVENT_WORKOUT_COMPLETED) == []


class TestEventBus:
    def test_failing_handler_is_logged_and_others_still_run(self, caplog):
        bus = EventBus()
        received = []

        def failing(event):
            raise RuntimeError("handler failed")

        bus.subscribe(EVENT_WORKOUT_COMPLETED, failing)
        bus.subscribe(EVENT_WORKOUT_COMPLETED, received.append)

        with caplog.at_level(logging.ERROR, logger="core.events"):
            bus.publish(_completed(7))

        assert [e.workout_id for e in received] == [7]
        assert any("Error in event handler" in r.getMessage() for r in caplog.records)

    def test_publish_delivers_every_event(self):
        bus = EventBus()
        received = []
        bus.subscribe(EVENT_WORKOUT_COMPLETED, received.append)

        bus.publish(_completed(1), _completed(2))

        assert [e.workout_id for e in received] == [1, 2]


class TestWorkoutCompletedEvent:
    def _workout(self, date=None):
        workout = Workout(name="Push day", index=1, workout_cycle_id=1, date=date, completed=False, skipped=False)
        workout.id = 42
        return workout

    def test_complete_dates_workout_and_raises_once(self):
        at = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        workout = self._workout()

        workout.complete(at, user_id=1)
        workout.complete(at, user_id=1)
        events = workout.drain_events()

        assert workout.completed is True
        assert workout.date == at
        assert len(events) == 1
        assert events[0].workout_id == 42
        assert events[0].first is True
        assert workout.drain_events() == []

    def test_dated_workout_is_not_a_first_completion(self):
        dated = datetime(2026, 1, 1, tzinfo=timezone.utc)
        workout = self._workout(date=dated)

        workout.complete(datetime(2026, 1, 5, tzinfo=timezone.utc), user_id=1)

        assert workout.date == dated
        assert workout.drain_events()[0].first is False

    def test_events_get_unique_ids(self):
        assert _completed().event_id != _completed().event_id
