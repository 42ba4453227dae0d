"""
Completion cascade.

Parent status is never written directly by callers; it is re-derived from
the children's counts whenever a child changes:

    set -> workout exercise -> workout -> cycle

Each level is a synchronous handler on the domain event dispatcher, running
inside the caller's transaction. Re-deriving from counts makes every step
idempotent: replaying an event yields the same flags.
"""
import logging
from typing import Iterable, Tuple

from core.events import DomainEventDispatcher
from core.unit_of_work import UnitOfWork
from domain_events import (
    EVENT_WORKOUT_CYCLE_STATUS_CHANGED,
    EVENT_WORKOUT_EXERCISE_STATUS_CHANGED,
    EVENT_WORKOUT_SET_STATUS_CHANGED,
    EVENT_WORKOUT_STATUS_CHANGED,
    WorkoutCycleStatusChanged,
    WorkoutExerciseStatusChanged,
    WorkoutSetStatusChanged,
    WorkoutStatusChanged,
)
from repositories import (
    WorkoutCycleRepository,
    WorkoutExerciseRepository,
    WorkoutRepository,
    WorkoutSetRepository,
)

from .summary import WorkoutSummaryService

logger = logging.getLogger(__name__)


def resolve_completion(total: int, pending: int, skipped: int) -> Tuple[bool, bool]:
    """
    Derive ``(completed, skipped)`` of a parent from its children's counts.

    completed: at least one child and none pending
    skipped:   completed and every child skipped
    """
    if total <= 0:
        return False, False
    completed = pending == 0
    return completed, completed and skipped == total


def emit(uow: UnitOfWork, dispatcher: DomainEventDispatcher, events: Iterable) -> None:
    """Accumulate events for post-commit publication and dispatch them now."""
    events = list(events)
    if not events:
        return
    uow.accumulate(events)
    dispatcher.dispatch(events)


class CompletionCascade:
    def __init__(self, uow: UnitOfWork, dispatcher: DomainEventDispatcher, summary: WorkoutSummaryService):
        self.uow = uow
        self.dispatcher = dispatcher
        self.summary = summary
        self.cycles = WorkoutCycleRepository(uow)
        self.workouts = WorkoutRepository(uow)
        self.workout_exercises = WorkoutExerciseRepository(uow)
        self.workout_sets = WorkoutSetRepository(uow)

    def register(self) -> None:
        self.dispatcher.register(EVENT_WORKOUT_SET_STATUS_CHANGED, self.on_set_status_changed)
        self.dispatcher.register(EVENT_WORKOUT_EXERCISE_STATUS_CHANGED, self.on_exercise_status_changed)
        self.dispatcher.register(EVENT_WORKOUT_STATUS_CHANGED, self.on_workout_status_changed)
        self.dispatcher.register(EVENT_WORKOUT_CYCLE_STATUS_CHANGED, self.on_cycle_status_changed)

    def _emit(self, *events) -> None:
        emit(self.uow, self.dispatcher, events)

    def on_set_status_changed(self, event: WorkoutSetStatusChanged) -> None:
        total, pending, skipped = self.workout_sets.count_statuses(event.workout_exercise_id)
        completed, all_skipped = resolve_completion(total, pending, skipped)
        self.workout_exercises.update_status(event.workout_exercise_id, completed, all_skipped)
        self._emit(
            WorkoutExerciseStatusChanged(
                user_id=event.user_id,
                plan_id=event.plan_id,
                cycle_id=event.cycle_id,
                workout_id=event.workout_id,
                workout_exercise_id=event.workout_exercise_id,
                completed=completed,
                skipped=all_skipped,
                at=event.at,
            )
        )

    def on_exercise_status_changed(self, event: WorkoutExerciseStatusChanged) -> None:
        total, pending, skipped = self.workout_exercises.count_statuses(event.workout_id)
        completed, all_skipped = resolve_completion(total, pending, skipped)
        self._emit(
            WorkoutStatusChanged(
                user_id=event.user_id,
                plan_id=event.plan_id,
                cycle_id=event.cycle_id,
                workout_id=event.workout_id,
                completed=completed,
                skipped=all_skipped,
                at=event.at,
            )
        )

    def on_workout_status_changed(self, event: WorkoutStatusChanged) -> None:
        workout = self.workouts.get_by_id(event.workout_id)
        was_completed = bool(workout.completed)

        if event.completed:
            workout.complete(event.at, event.user_id)
            workout.skipped = event.skipped
        else:
            workout.completed = False
            workout.skipped = False
        self.workouts.save(workout)

        if event.completed and not was_completed:
            self.summary.calculate(event.user_id, workout.id)
            logger.info(
                f"Workout {workout.id} completed",
                extra={
                    "extra_fields": {
                        "user_id": event.user_id,
                        "workout_id": workout.id,
                        "cycle_id": event.cycle_id,
                        "skipped": event.skipped,
                    }
                },
            )

        self._emit(*workout.drain_events())
        self._emit(
            WorkoutCycleStatusChanged(
                user_id=event.user_id,
                plan_id=event.plan_id,
                cycle_id=event.cycle_id,
                at=event.at,
            )
        )

    def on_cycle_status_changed(self, event: WorkoutCycleStatusChanged) -> None:
        total, pending, skipped = self.workouts.count_statuses(event.cycle_id)
        completed, all_skipped = resolve_completion(total, pending, skipped)
        self.cycles.update_status(event.cycle_id, completed, all_skipped)
