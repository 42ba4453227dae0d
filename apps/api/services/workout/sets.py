from typing import List, Optional

from core.exceptions import ValidationError
from domain_events import WorkoutSetStatusChanged
from models import WorkoutSet

from .base import PreviousSet, WorkoutServiceBase


def _validate_values(weight: Optional[float], reps: Optional[int]) -> None:
    if weight is not None and weight < 0:
        raise ValidationError("weight must not be negative", field="weight")
    if reps is not None and reps < 0:
        raise ValidationError("reps must not be negative", field="reps")


class WorkoutSetOperations(WorkoutServiceBase):
    def create_workout_set(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        index: Optional[int] = None,
    ) -> WorkoutSet:
        """
        Add a pending set; its previous values come from the IE's carry-over
        at the same position.

        Locks: workout_cycles, workouts, workout_exercises.
        """
        _validate_values(weight, reps)

        def run() -> WorkoutSet:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)

            position = self.workout_sets.resolve_insert_index(we.id, index)
            previous = self._previous_sets(user_id, we.individual_exercise_id, position)
            prior = previous[position - 1] if len(previous) >= position else None
            workout_set = self.workout_sets.create(
                we.id,
                position,
                weight=weight,
                reps=reps,
                previous_weight=prior.weight if prior else None,
                previous_reps=prior.reps if prior else None,
            )
            self._emit(
                WorkoutSetStatusChanged(
                    user_id=user_id,
                    plan_id=plan_id,
                    cycle_id=cycle_id,
                    workout_id=workout_id,
                    workout_exercise_id=we.id,
                    workout_set_id=workout_set.id,
                    at=self._now(),
                )
            )
            return self.workout_sets.get(user_id, plan_id, cycle_id, workout_id, we.id, workout_set.id)

        return self.uow.do(run)

    def get_workout_set(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, workout_exercise_id: int, workout_set_id: int
    ) -> WorkoutSet:
        return self.uow.do_if_not_in_tx(
            lambda: self.workout_sets.get(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)
        )

    def list_workout_sets(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, workout_exercise_id: int
    ) -> List[WorkoutSet]:
        def run() -> List[WorkoutSet]:
            self.workout_exercises.ensure_owned(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            return self.workout_sets.list(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)

        return self.uow.do_if_not_in_tx(run)

    def update_workout_set(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        workout_set_id: int,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
    ) -> WorkoutSet:
        """Log weight and reps. Locks: workout_sets."""
        _validate_values(weight, reps)

        def run() -> WorkoutSet:
            workout_set = self.workout_sets.get_for_update(
                user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id
            )
            values = {}
            if weight is not None:
                values["weight"] = weight
            if reps is not None:
                values["reps"] = reps
            if values:
                self.workout_sets.update_values(workout_set, values)
            return self.workout_sets.get(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)

        return self.uow.do(run)

    def complete_workout_set(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        workout_set_id: int,
        completed: bool,
        skipped: bool = False,
    ) -> WorkoutSet:
        """
        Write the status of exactly one set; every ancestor is re-derived by
        the completion cascade. Completing links carry-over on the IE.

        Concurrent completions of sibling sets serialize on the exercise row.

        Locks: workout_cycles, workouts, workout_exercises,
        individual_exercises, workout_sets.
        """
        completed, skipped = self._normalize_status(completed, skipped)

        def run() -> WorkoutSet:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            ie = self.individual_exercises.get_for_update(user_id, we.individual_exercise_id)
            workout_set = self.workout_sets.get_for_update(
                user_id, plan_id, cycle_id, workout_id, we.id, workout_set_id
            )

            self.workout_sets.update_status(workout_set.id, completed, skipped)
            if completed:
                self._link_carry_over(we, ie)

            self._emit(
                WorkoutSetStatusChanged(
                    user_id=user_id,
                    plan_id=plan_id,
                    cycle_id=cycle_id,
                    workout_id=workout_id,
                    workout_exercise_id=we.id,
                    workout_set_id=workout_set.id,
                    completed=completed,
                    skipped=skipped,
                    at=self._now(),
                )
            )
            return self.workout_sets.get(user_id, plan_id, cycle_id, workout_id, we.id, workout_set.id)

        return self.uow.do(run)

    def delete_workout_set(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, workout_exercise_id: int, workout_set_id: int
    ) -> None:
        """Locks: workout_cycles, workouts, workout_exercises, workout_sets."""

        def run() -> None:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            workout_set = self.workout_sets.get_for_update(
                user_id, plan_id, cycle_id, workout_id, we.id, workout_set_id
            )
            self.workout_sets.delete(workout_set.id)
            self.workout_sets.decrement_indexes_after(we.id, workout_set.index)
            self._emit(
                WorkoutSetStatusChanged(
                    user_id=user_id,
                    plan_id=plan_id,
                    cycle_id=cycle_id,
                    workout_id=workout_id,
                    workout_exercise_id=we.id,
                    at=self._now(),
                )
            )

        self.uow.do(run)

    def move_workout_set(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        workout_set_id: int,
        direction: str,
    ) -> WorkoutSet:
        """Locks: workout_exercises, workout_sets."""
        self._validate_direction(direction)

        def run() -> WorkoutSet:
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            workout_set = self.workout_sets.get_for_update(
                user_id, plan_id, cycle_id, workout_id, we.id, workout_set_id
            )
            neighbor = self._neighbor_index(workout_set.index, direction)
            self.workout_sets.swap_by_index(we.id, workout_set.index, neighbor)
            return self.workout_sets.get(user_id, plan_id, cycle_id, workout_id, we.id, workout_set.id)

        return self.uow.do(run)

    def get_previous_sets(self, user_id: int, individual_exercise_id: int, qt: int) -> List[PreviousSet]:
        """Carry-over values for ``qt`` positions; empty when there is no history."""
        self._validate_sets_qt(qt)
        return self.uow.do_if_not_in_tx(lambda: self._previous_sets(user_id, individual_exercise_id, qt))
