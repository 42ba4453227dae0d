from typing import List, Optional

from domain_events import WorkoutExerciseStatusChanged, WorkoutSetStatusChanged
from models import WorkoutExercise

from .base import WorkoutServiceBase


class WorkoutExerciseOperations(WorkoutServiceBase):
    def _sets_changed(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id) -> None:
        self._emit(
            WorkoutSetStatusChanged(
                user_id=user_id,
                plan_id=plan_id,
                cycle_id=cycle_id,
                workout_id=workout_id,
                workout_exercise_id=workout_exercise_id,
                at=self._now(),
            )
        )

    def create_workout_exercise(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        individual_exercise_id: int,
        sets_qt: int,
        index: Optional[int] = None,
    ) -> WorkoutExercise:
        """
        Add an exercise with ``sets_qt`` pending sets pre-filled from the
        IE's last completed exercise. The parent workout becomes pending.

        Locks: workout_cycles, workouts.
        """
        self._validate_sets_qt(sets_qt)

        def run() -> WorkoutExercise:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            ie = self.individual_exercises.get(user_id, individual_exercise_id)

            position = self.workout_exercises.resolve_insert_index(workout_id, index)
            we = self.workout_exercises.create(workout_id, position, ie.id)
            self._create_sets(user_id, we.id, ie.id, sets_qt)
            self._sets_changed(user_id, plan_id, cycle_id, workout_id, we.id)
            return self.workout_exercises.get(user_id, plan_id, cycle_id, workout_id, we.id)

        return self.uow.do(run)

    def get_workout_exercise(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, workout_exercise_id: int
    ) -> WorkoutExercise:
        return self.uow.do_if_not_in_tx(
            lambda: self.workout_exercises.get(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
        )

    def list_workout_exercises(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int
    ) -> List[WorkoutExercise]:
        def run() -> List[WorkoutExercise]:
            self.workouts.ensure_owned(user_id, plan_id, cycle_id, workout_id)
            return self.workout_exercises.list(user_id, plan_id, cycle_id, workout_id)

        return self.uow.do_if_not_in_tx(run)

    def complete_workout_exercise(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        completed: bool,
        skipped: bool = False,
    ) -> WorkoutExercise:
        """
        completed: every set becomes completed
        skipped:   pending sets become skipped
        neither:   every set returns to pending

        Completing links carry-over on the IE.

        Locks: workout_cycles, workouts, workout_exercises, individual_exercises.
        """
        completed, skipped = self._normalize_status(completed, skipped)

        def run() -> WorkoutExercise:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)

            if completed:
                self.workout_sets.mark_all_completed([we.id])
            elif skipped:
                self.workout_sets.mark_pending_skipped([we.id])
            else:
                self.workout_sets.mark_all_pending([we.id])

            if completed:
                ie = self.individual_exercises.get_for_update(user_id, we.individual_exercise_id)
                self._link_carry_over(we, ie)

            if self.workout_sets.count_total(we.id) > 0:
                self._sets_changed(user_id, plan_id, cycle_id, workout_id, we.id)
            else:
                # No sets to derive from: the requested flags stand.
                self.workout_exercises.update_status(we.id, completed, skipped)
                self._emit(
                    WorkoutExerciseStatusChanged(
                        user_id=user_id,
                        plan_id=plan_id,
                        cycle_id=cycle_id,
                        workout_id=workout_id,
                        workout_exercise_id=we.id,
                        completed=completed,
                        skipped=skipped,
                        at=self._now(),
                    )
                )
            return self.workout_exercises.get(user_id, plan_id, cycle_id, workout_id, we.id)

        return self.uow.do(run)

    def delete_workout_exercise(
        self, user_id: int, plan_id: int, cycle_id: int, workout_id: int, workout_exercise_id: int
    ) -> None:
        """Locks: workout_cycles, workouts, workout_exercises, individual_exercises."""

        def run() -> None:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            self._rewire_individual_exercises(user_id, [we])
            self.workout_exercises.delete(we.id)
            self.workout_exercises.decrement_indexes_after(workout_id, we.index)
            self._emit(
                WorkoutExerciseStatusChanged(
                    user_id=user_id,
                    plan_id=plan_id,
                    cycle_id=cycle_id,
                    workout_id=workout_id,
                    at=self._now(),
                )
            )

        self.uow.do(run)

    def move_workout_exercise(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        direction: str,
    ) -> WorkoutExercise:
        """Locks: workouts, workout_exercises."""
        self._validate_direction(direction)

        def run() -> WorkoutExercise:
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            we = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            neighbor = self._neighbor_index(we.index, direction)
            self.workout_exercises.swap_by_index(we.workout_id, we.index, neighbor)
            return self.workout_exercises.get(user_id, plan_id, cycle_id, workout_id, we.id)

        return self.uow.do(run)

    def replace_workout_exercise(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        workout_id: int,
        workout_exercise_id: int,
        individual_exercise_id: int,
        sets_qt: int,
    ) -> WorkoutExercise:
        """
        Swap the exercise at a position for another IE with fresh carry-over
        sets. The new exercise keeps the old index; the workout becomes pending.

        Locks: workout_cycles, workouts, workout_exercises, individual_exercises.
        """
        self._validate_sets_qt(sets_qt)

        def run() -> WorkoutExercise:
            self.cycles.lock(user_id, plan_id, cycle_id)
            self.workouts.lock(user_id, plan_id, cycle_id, workout_id)
            old = self.workout_exercises.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            ie = self.individual_exercises.get(user_id, individual_exercise_id)
            position = old.index

            self._rewire_individual_exercises(user_id, [old])
            self.workout_exercises.delete(old.id)

            we = self.workout_exercises.create(workout_id, position, ie.id)
            self._create_sets(user_id, we.id, ie.id, sets_qt)
            self._sets_changed(user_id, plan_id, cycle_id, workout_id, we.id)
            return self.workout_exercises.get(user_id, plan_id, cycle_id, workout_id, we.id)

        return self.uow.do(run)
