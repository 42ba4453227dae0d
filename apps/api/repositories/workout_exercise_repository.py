from typing import List, Optional

from sqlalchemy.orm import selectinload

from models import Workout, WorkoutExercise
from repositories.base import BaseRepository, IndexedRepositoryMixin
from repositories.scopes import scope_workout_exercises


def _with_sets(query):
    return query.options(
        selectinload(WorkoutExercise.workout_sets),
        selectinload(WorkoutExercise.individual_exercise),
    )


class WorkoutExerciseRepository(IndexedRepositoryMixin, BaseRepository):
    model = WorkoutExercise
    resource = "Workout exercise"
    parent_attr = "workout_id"

    def create(
        self,
        workout_id: int,
        index: int,
        individual_exercise_id: int,
        previous_exercise_id: Optional[int] = None,
    ) -> WorkoutExercise:
        return self.add(
            WorkoutExercise(
                workout_id=workout_id,
                index=index,
                individual_exercise_id=individual_exercise_id,
                previous_exercise_id=previous_exercise_id,
                completed=False,
                skipped=False,
            )
        )

    def _owned(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id):
        return self._query().filter(
            WorkoutExercise.id.in_(
                scope_workout_exercises(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)
            )
        )

    def get(
        self,
        user_id: int,
        plan_id: Optional[int],
        cycle_id: Optional[int],
        workout_id: Optional[int],
        workout_exercise_id: int,
    ) -> WorkoutExercise:
        query = _with_sets(self._owned(user_id, plan_id, cycle_id, workout_id, workout_exercise_id))
        return self._one(query, workout_exercise_id)

    def ensure_owned(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id: int) -> None:
        self._ensure(
            scope_workout_exercises(user_id, plan_id, cycle_id, workout_id, workout_exercise_id),
            workout_exercise_id,
        )

    def get_for_update(
        self,
        user_id: int,
        plan_id: Optional[int],
        cycle_id: Optional[int],
        workout_id: Optional[int],
        workout_exercise_id: int,
    ) -> WorkoutExercise:
        query = self._owned(user_id, plan_id, cycle_id, workout_id, workout_exercise_id).with_for_update()
        return self._one(query, workout_exercise_id)

    def lock(self, user_id, plan_id, cycle_id, workout_id, workout_exercise_id) -> None:
        self.get_for_update(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)

    def get_owned_by_user(self, user_id: int, workout_exercise_id: int) -> WorkoutExercise:
        """Read through the user's ownership only, for back-reference hops."""
        return self.get(user_id, None, None, None, workout_exercise_id)

    def list(self, user_id: int, plan_id: int, cycle_id: int, workout_id: int) -> List[WorkoutExercise]:
        return (
            _with_sets(
                self._query().filter(
                    WorkoutExercise.id.in_(scope_workout_exercises(user_id, plan_id, cycle_id, workout_id))
                )
            )
            .order_by(WorkoutExercise.index.asc(), WorkoutExercise.id.asc())
            .all()
        )

    def list_by_workout(self, workout_id: int) -> List[WorkoutExercise]:
        return (
            _with_sets(self._query().filter(WorkoutExercise.workout_id == workout_id))
            .order_by(WorkoutExercise.index.asc(), WorkoutExercise.id.asc())
            .all()
        )

    def list_ids_by_workout(self, workout_id: int) -> List[int]:
        rows = self.db.query(WorkoutExercise.id).filter(WorkoutExercise.workout_id == workout_id).all()
        return [row.id for row in rows]

    def list_by_cycle(self, cycle_id: int) -> List[WorkoutExercise]:
        """Every exercise of the cycle, newest first."""
        return (
            self._query()
            .join(Workout, Workout.id == WorkoutExercise.workout_id)
            .filter(Workout.workout_cycle_id == cycle_id)
            .order_by(WorkoutExercise.id.desc())
            .all()
        )

    def update_status(self, workout_exercise_id: int, completed: bool, skipped: bool) -> None:
        self._update_by_id(
            workout_exercise_id,
            {WorkoutExercise.completed: completed, WorkoutExercise.skipped: skipped},
        )

    def set_previous_exercise(self, workout_exercise_id: int, previous_exercise_id: Optional[int]) -> None:
        self._update_by_id(workout_exercise_id, {WorkoutExercise.previous_exercise_id: previous_exercise_id})

    def delete(self, workout_exercise_id: int) -> None:
        self._delete_by_id(workout_exercise_id)

    # --- bulk status helpers (whole-workout completion) ---

    def mark_all_completed(self, workout_id: int) -> None:
        self.db.query(WorkoutExercise).filter(WorkoutExercise.workout_id == workout_id).update(
            {WorkoutExercise.completed: True, WorkoutExercise.skipped: False},
            synchronize_session=False,
        )

    def mark_pending_skipped(self, workout_id: int) -> None:
        self.db.query(WorkoutExercise).filter(
            WorkoutExercise.workout_id == workout_id,
            WorkoutExercise.completed.is_(False),
            WorkoutExercise.skipped.is_(False),
        ).update({WorkoutExercise.skipped: True}, synchronize_session=False)

    def mark_all_pending(self, workout_id: int) -> None:
        self.db.query(WorkoutExercise).filter(WorkoutExercise.workout_id == workout_id).update(
            {WorkoutExercise.completed: False, WorkoutExercise.skipped: False},
            synchronize_session=False,
        )
