import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from domain_events import WorkoutCycleStatusChanged, WorkoutExerciseStatusChanged, WorkoutSetStatusChanged
from models import Workout

from .base import WorkoutServiceBase
from .completion import resolve_completion
from .energy import EnergyEstimate

logger = logging.getLogger(__name__)


@dataclass
class WorkoutExerciseDraft:
    individual_exercise_id: int
    sets_qt: int


@dataclass
class WorkoutDraft:
    """One workout of a ``create_multiple_workouts`` batch."""
    name: str
    date: Optional[datetime] = None
    exercises: List[WorkoutExerciseDraft] = field(default_factory=list)


class WorkoutOperations(WorkoutServiceBase):
    def _cycle_changed(self, user_id: int, plan_id: int, cycle_id: int) -> None:
        self._emit(WorkoutCycleStatusChanged(user_id=user_id, plan_id=plan_id, cycle_id=cycle_id, at=self._now()))

    def create_workout(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        name: str,
        date: Optional[datetime] = None,
        index: Optional[int] = None,
    ) -> Workout:
        """
        Add a workout to a cycle. Without an index (or with one below 1) it is
        appended; otherwise it is inserted there and later siblings shift.

        Locks: workout_cycles.
        """
        name = self._require_name(name)

        def run() -> Workout:
            self.cycles.lock(user_id, plan_id, cycle_id)
            position = self.workouts.resolve_insert_index(cycle_id, index)
            workout = self.workouts.create(cycle_id, name, position, date=date)
            self._cycle_changed(user_id, plan_id, cycle_id)
            return self.workouts.get(user_id, plan_id, cycle_id, workout.id)

        return self.uow.do(run)

    def create_multiple_workouts(
        self, user_id: int, plan_id: int, cycle_id: int, drafts: List[WorkoutDraft]
    ) -> List[Workout]:
        """
        Append several workouts, each with its exercises and carry-over sets.

        Locks: workout_cycles.
        """
        for draft in drafts:
            self._require_name(draft.name)
            for exercise in draft.exercises:
                self._validate_sets_qt(exercise.sets_qt)

        def run() -> List[Workout]:
            self.cycles.lock(user_id, plan_id, cycle_id)
            created_ids = []
            for draft in drafts:
                position = self.workouts.get_max_index(cycle_id) + 1
                workout = self.workouts.create(cycle_id, draft.name.strip(), position, date=draft.date)
                for i, exercise in enumerate(draft.exercises):
                    ie = self.individual_exercises.get(user_id, exercise.individual_exercise_id)
                    we = self.workout_exercises.create(workout.id, i + 1, ie.id)
                    self._create_sets(user_id, we.id, ie.id, exercise.sets_qt)
                    self._emit(
                        WorkoutSetStatusChanged(
                            user_id=user_id,
                            plan_id=plan_id,
                            cycle_id=cycle_id,
                            workout_id=workout.id,
                            workout_exercise_id=we.id,
                            at=self._now(),
                        )
                    )
                created_ids.append(workout.id)
            self._cycle_changed(user_id, plan_id, cycle_id)
            return [self.workouts.get(user_id, plan_id, cycle_id, workout_id) for workout_id in created_ids]

        return self.uow.do(run)

    def get_workout(self, user_id: int, plan_id: int, cycle_id: int, workout_id: int) -> Workout:
        return self.uow.do_if_not_in_tx(lambda: self.workouts.get(user_id, plan_id, cycle_id, workout_id))

    def list_workouts(self, user_id: int, plan_id: int, cycle_id: int) -> List[Workout]:
        def run() -> List[Workout]:
            self.cycles.ensure_owned(user_id, plan_id, cycle_id)
            return self.workouts.list(user_id, plan_id, cycle_id)

        return self.uow.do_if_not_in_tx(run)

    def update_workout(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        name: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Workout:
        """Locks: workouts."""

        def run() -> Workout:
            workout = self.workouts.get_for_update(user_id, plan_id, cycle_id, workout_id)
            values = {}
            if name is not None:
                values["name"] = self._require_name(name)
            if date is not None:
                values["date"] = date
            if values:
                self.workouts.update_fields(workout, values)
            return self.workouts.get(user_id, plan_id, cycle_id, workout_id)

        return self.uow.do(run)

    def delete_workout(self, user_id: int, plan_id: int, cycle_id: int, workout_id: int) -> None:
        """Locks: workout_cycles, workouts."""

        def run() -> None:
            self.cycles.lock(user_id, plan_id, cycle_id)
            workout = self.workouts.get_for_update(user_id, plan_id, cycle_id, workout_id)
            self._rewire_individual_exercises(user_id, self.workout_exercises.list_by_workout(workout.id))
            self.workouts.delete(workout.id)
            self.workouts.decrement_indexes_after(cycle_id, workout.index)
            self._cycle_changed(user_id, plan_id, cycle_id)

        self.uow.do(run)

    def complete_workout(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        completed: bool,
        skipped: bool = False,
    ) -> Tuple[Workout, float]:
        """
        Complete, skip or reopen a whole workout.

        completed: every exercise and set becomes completed
        skipped:   pending exercises and sets become skipped
        neither:   everything returns to pending

        Exercise and workout flags are then re-derived from counts. Returns
        the workout and its calorie estimate (0 unless completed).

        Locks: workout_cycles, workouts, individual_exercises.
        """
        completed, skipped = self._normalize_status(completed, skipped)

        def run() -> Tuple[Workout, float]:
            self.cycles.lock(user_id, plan_id, cycle_id)
            workout = self.workouts.get_for_update(user_id, plan_id, cycle_id, workout_id)
            we_ids = self.workout_exercises.list_ids_by_workout(workout.id)

            if completed:
                self.workout_exercises.mark_all_completed(workout.id)
                self.workout_sets.mark_all_completed(we_ids)
            elif skipped:
                self.workout_exercises.mark_pending_skipped(workout.id)
                self.workout_sets.mark_pending_skipped(we_ids)
            else:
                self.workout_exercises.mark_all_pending(workout.id)
                self.workout_sets.mark_all_pending(we_ids)

            for we in self.workout_exercises.list_by_workout(workout.id):
                if we.workout_sets:
                    total, pending, skipped_count = self.workout_sets.count_statuses(we.id)
                    self.workout_exercises.update_status(we.id, *resolve_completion(total, pending, skipped_count))
                if completed:
                    ie = self.individual_exercises.get_for_update(user_id, we.individual_exercise_id)
                    self._link_carry_over(we, ie)

            self._emit(
                WorkoutExerciseStatusChanged(
                    user_id=user_id,
                    plan_id=plan_id,
                    cycle_id=cycle_id,
                    workout_id=workout.id,
                    completed=completed,
                    skipped=skipped,
                    at=self._now(),
                )
            )

            workout = self.workouts.get(user_id, plan_id, cycle_id, workout_id)
            calories = (workout.estimated_calories or 0.0) if workout.completed else 0.0
            return workout, calories

        return self.uow.do(run)

    def move_workout(self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, direction: str) -> Workout:
        """Swap with the neighbor above (``up``) or below (``down``). Locks: workout_cycles, workouts."""
        self._validate_direction(direction)

        def run() -> Workout:
            self.cycles.lock(user_id, plan_id, cycle_id)
            workout = self.workouts.get_for_update(user_id, plan_id, cycle_id, workout_id)
            neighbor = self._neighbor_index(workout.index, direction)
            self.workouts.swap_by_index(workout.workout_cycle_id, workout.index, neighbor)
            return self.workouts.get(user_id, plan_id, cycle_id, workout_id)

        return self.uow.do(run)

    def calculate_workout_summary(self, user_id: int, plan_id: int, cycle_id: int, workout_id: int) -> EnergyEstimate:
        def run() -> EnergyEstimate:
            self.workouts.ensure_owned(user_id, plan_id, cycle_id, workout_id)
            return self.summary.calculate(user_id, workout_id)

        return self.uow.do_if_not_in_tx(run)
