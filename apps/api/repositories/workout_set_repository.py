from typing import Iterable, List, Optional

from sqlalchemy import and_

from models import IndividualExercise, Workout, WorkoutExercise, WorkoutSet
from repositories.base import BaseRepository, IndexedRepositoryMixin
from repositories.scopes import scope_workout_sets


class WorkoutSetRepository(IndexedRepositoryMixin, BaseRepository):
    model = WorkoutSet
    resource = "Workout set"
    parent_attr = "workout_exercise_id"

    def create(
        self,
        workout_exercise_id: int,
        index: int,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        previous_weight: Optional[float] = None,
        previous_reps: Optional[int] = None,
    ) -> WorkoutSet:
        return self.add(
            WorkoutSet(
                workout_exercise_id=workout_exercise_id,
                index=index,
                weight=weight,
                reps=reps,
                previous_weight=previous_weight,
                previous_reps=previous_reps,
                completed=False,
                skipped=False,
            )
        )

    def _owned(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id=None):
        return self._query().filter(
            WorkoutSet.id.in_(
                scope_workout_sets(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)
            )
        )

    def get(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id: int) -> WorkoutSet:
        query = self._owned(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)
        return self._one(query, workout_set_id)

    def get_for_update(
        self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id: int
    ) -> WorkoutSet:
        query = self._owned(
            user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id
        ).with_for_update()
        return self._one(query, workout_set_id)

    def list(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id) -> List[WorkoutSet]:
        return (
            self._owned(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            .order_by(WorkoutSet.index.asc(), WorkoutSet.id.asc())
            .all()
        )

    def list_by_exercise(self, workout_exercise_id: int) -> List[WorkoutSet]:
        return (
            self._query()
            .filter(WorkoutSet.workout_exercise_id == workout_exercise_id)
            .order_by(WorkoutSet.index.asc(), WorkoutSet.id.asc())
            .all()
        )

    def update_values(self, workout_set: WorkoutSet, values: dict) -> WorkoutSet:
        for key, value in values.items():
            setattr(workout_set, key, value)
        return self.save(workout_set)

    def update_status(self, workout_set_id: int, completed: bool, skipped: bool) -> None:
        self._update_by_id(workout_set_id, {WorkoutSet.completed: completed, WorkoutSet.skipped: skipped})

    def delete(self, workout_set_id: int) -> None:
        self._delete_by_id(workout_set_id)

    # --- bulk status helpers ---

    def mark_all_completed(self, workout_exercise_ids: Iterable[int]) -> None:
        ids = list(workout_exercise_ids)
        if not ids:
            return
        self.db.query(WorkoutSet).filter(WorkoutSet.workout_exercise_id.in_(ids)).update(
            {WorkoutSet.completed: True, WorkoutSet.skipped: False},
            synchronize_session=False,
        )

    def mark_pending_skipped(self, workout_exercise_ids: Iterable[int]) -> None:
        """Skip pending sets only; completed ones keep their state."""
        ids = list(workout_exercise_ids)
        if not ids:
            return
        self.db.query(WorkoutSet).filter(
            WorkoutSet.workout_exercise_id.in_(ids),
            WorkoutSet.completed.is_(False),
            WorkoutSet.skipped.is_(False),
        ).update({WorkoutSet.skipped: True}, synchronize_session=False)

    def mark_all_pending(self, workout_exercise_ids: Iterable[int]) -> None:
        ids = list(workout_exercise_ids)
        if not ids:
            return
        self.db.query(WorkoutSet).filter(WorkoutSet.workout_exercise_id.in_(ids)).update(
            {WorkoutSet.completed: False, WorkoutSet.skipped: False},
            synchronize_session=False,
        )

    # --- performance history ---

    def performance_rows(self, user_id: int, individual_exercise_ids: Optional[Iterable[int]] = None):
        """
        Logged (weight, reps) rows of the user's completed sets.

        Yields named rows with ``individual_exercise_id``, ``workout_exercise_id``,
        ``workout_id``, ``date``, ``weight`` and ``reps``, oldest workout first.
        """
        query = (
            self.db.query(
                WorkoutExercise.individual_exercise_id.label("individual_exercise_id"),
                WorkoutExercise.id.label("workout_exercise_id"),
                Workout.id.label("workout_id"),
                Workout.date.label("date"),
                WorkoutSet.weight.label("weight"),
                WorkoutSet.reps.label("reps"),
            )
            .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
            .join(Workout, Workout.id == WorkoutExercise.workout_id)
            .join(IndividualExercise, IndividualExercise.id == WorkoutExercise.individual_exercise_id)
            .filter(
                IndividualExercise.user_id == user_id,
                WorkoutSet.id.in_(scope_workout_sets(user_id)),
                and_(WorkoutSet.reps.isnot(None), WorkoutSet.weight.isnot(None)),
                WorkoutSet.completed.is_(True),
                WorkoutSet.skipped.is_(False),
            )
        )
        if individual_exercise_ids is not None:
            query = query.filter(WorkoutExercise.individual_exercise_id.in_(list(individual_exercise_ids)))
        return query.order_by(Workout.date.asc(), Workout.id.asc(), WorkoutSet.index.asc()).all()
