"""
Shared state and helpers of the workout service.

Lock order for every mutating path (levels a path does not touch are
skipped):

    workout_plans -> workout_cycles -> workouts -> workout_exercises
        -> individual_exercises -> workout_sets

Any path that can trigger the completion cascade locks the cycle first,
because the cascade writes every ancestor up to the cycle.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from core.events import DomainEventDispatcher
from core.exceptions import NotFoundError, ValidationError
from core.unit_of_work import UnitOfWork
from domain_events import utcnow
from models import IndividualExercise, WorkoutExercise
from repositories import (
    ExerciseRepository,
    IndividualExerciseRepository,
    UserProfileRepository,
    WorkoutCycleRepository,
    WorkoutExerciseRepository,
    WorkoutPlanRepository,
    WorkoutRepository,
    WorkoutSetRepository,
)

from .completion import emit
from .summary import WorkoutSummaryService

logger = logging.getLogger(__name__)

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"


@dataclass(frozen=True)
class PreviousSet:
    """Carry-over values for one set position."""
    weight: Optional[float]
    reps: Optional[int]


class WorkoutServiceBase:
    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: DomainEventDispatcher,
        summary: WorkoutSummaryService,
        max_sets_per_exercise: int = 20,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.uow = uow
        self.dispatcher = dispatcher
        self.summary = summary
        self.max_sets_per_exercise = max_sets_per_exercise
        self._clock = clock or utcnow

        self.plans = WorkoutPlanRepository(uow)
        self.cycles = WorkoutCycleRepository(uow)
        self.workouts = WorkoutRepository(uow)
        self.workout_exercises = WorkoutExerciseRepository(uow)
        self.workout_sets = WorkoutSetRepository(uow)
        self.individual_exercises = IndividualExerciseRepository(uow)
        self.exercises = ExerciseRepository(uow)
        self.profiles = UserProfileRepository(uow)

    def _now(self) -> datetime:
        return self._clock()

    def _emit(self, *events) -> None:
        emit(self.uow, self.dispatcher, events)

    # --- validation ---

    @staticmethod
    def _require_name(name: Optional[str], field: str = "name") -> str:
        if name is None or not name.strip():
            raise ValidationError(f"{field} is required", field=field)
        return name.strip()

    def _validate_sets_qt(self, sets_qt: int) -> None:
        if sets_qt is None or sets_qt < 1:
            raise ValidationError("sets quantity must be greater than 0", field="sets_qt")
        if sets_qt > self.max_sets_per_exercise:
            raise ValidationError(
                f"sets quantity must not exceed {self.max_sets_per_exercise}", field="sets_qt"
            )

    @staticmethod
    def _validate_direction(direction: str) -> None:
        if direction not in (DIRECTION_UP, DIRECTION_DOWN):
            raise ValidationError(f"invalid direction: {direction}", field="direction")

    @staticmethod
    def _neighbor_index(index: int, direction: str) -> int:
        neighbor = index - 1 if direction == DIRECTION_UP else index + 1
        if neighbor < 1:
            raise ValidationError(f"invalid neighbor index: {neighbor}", field="direction")
        return neighbor

    @staticmethod
    def _normalize_status(completed: bool, skipped: bool):
        """Completed wins over skipped."""
        if completed:
            return True, False
        return False, bool(skipped)

    # --- carry-over ---

    def _previous_sets(self, user_id: int, individual_exercise_id: int, qt: int) -> List[PreviousSet]:
        """
        Up to ``qt`` carry-over values from the IE's last completed exercise.

        Position i copies the i-th prior set; positions past the end copy the
        last prior set. Missing or foreign rows yield an empty list.
        """
        try:
            ie = self.individual_exercises.get(user_id, individual_exercise_id)
            if ie.last_completed_workout_exercise_id is None:
                return []
            prior_we = self.workout_exercises.get_owned_by_user(user_id, ie.last_completed_workout_exercise_id)
        except NotFoundError:
            return []

        prior_sets = self.workout_sets.list_by_exercise(prior_we.id)
        if not prior_sets:
            return []

        result = []
        for i in range(qt):
            source = prior_sets[i] if i < len(prior_sets) else prior_sets[-1]
            result.append(PreviousSet(weight=source.weight, reps=source.reps))
        return result

    def _create_sets(self, user_id: int, workout_exercise_id: int, individual_exercise_id: int, sets_qt: int) -> None:
        previous = self._previous_sets(user_id, individual_exercise_id, sets_qt)
        for i in range(sets_qt):
            prior = previous[i] if i < len(previous) else None
            self.workout_sets.create(
                workout_exercise_id,
                i + 1,
                previous_weight=prior.weight if prior else None,
                previous_reps=prior.reps if prior else None,
            )

    def _link_carry_over(self, workout_exercise: WorkoutExercise, individual_exercise: IndividualExercise) -> None:
        """
        Record ``workout_exercise`` as the IE's most recent completed exercise.

        The exercise inherits the IE's previous pointer as its own carry-over
        source when it has none yet.
        """
        last_id = individual_exercise.last_completed_workout_exercise_id
        if (
            workout_exercise.previous_exercise_id is None
            and last_id is not None
            and last_id != workout_exercise.id
        ):
            self.workout_exercises.set_previous_exercise(workout_exercise.id, last_id)
        if last_id != workout_exercise.id:
            self.individual_exercises.set_last_completed(individual_exercise.id, workout_exercise.id)

    def _rewire_individual_exercises(self, user_id: int, workout_exercises: List[WorkoutExercise]) -> None:
        """
        Before deleting exercises, move IE pointers that name them back to
        each exercise's own carry-over source. Newest first, so chains inside
        the deleted batch unwind fully.
        """
        for we in sorted(workout_exercises, key=lambda row: row.id, reverse=True):
            target = we.previous_exercise_id
            if target is not None and not self.workout_exercises.exists(target):
                target = None
            self.individual_exercises.rewire_last_completed(user_id, we.id, target)
