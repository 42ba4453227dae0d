from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import selectinload

from models import Workout, WorkoutExercise
from repositories.base import BaseRepository, IndexedRepositoryMixin
from repositories.scopes import scope_workouts


def _with_tree(query):
    return query.options(
        selectinload(Workout.workout_exercises).selectinload(WorkoutExercise.workout_sets),
        selectinload(Workout.workout_exercises).selectinload(WorkoutExercise.individual_exercise),
    )


class WorkoutRepository(IndexedRepositoryMixin, BaseRepository):
    model = Workout
    resource = "Workout"
    parent_attr = "workout_cycle_id"

    def create(
        self,
        cycle_id: int,
        name: str,
        index: int,
        date: Optional[datetime] = None,
        previous_workout_id: Optional[int] = None,
    ) -> Workout:
        return self.add(
            Workout(
                workout_cycle_id=cycle_id,
                name=name,
                index=index,
                date=date,
                previous_workout_id=previous_workout_id,
                completed=False,
                skipped=False,
            )
        )

    def _owned(self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int], workout_id: Optional[int]):
        return self._query().filter(Workout.id.in_(scope_workouts(user_id, plan_id, cycle_id, workout_id)))

    def get(self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int], workout_id: int) -> Workout:
        return self._one(_with_tree(self._owned(user_id, plan_id, cycle_id, workout_id)), workout_id)

    def ensure_owned(self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int], workout_id: int) -> None:
        self._ensure(scope_workouts(user_id, plan_id, cycle_id, workout_id), workout_id)

    def get_for_update(
        self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int], workout_id: int
    ) -> Workout:
        return self._one(self._owned(user_id, plan_id, cycle_id, workout_id).with_for_update(), workout_id)

    def lock(self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int], workout_id: int) -> None:
        self.get_for_update(user_id, plan_id, cycle_id, workout_id)

    def get_by_id(self, workout_id: int) -> Workout:
        """Unscoped read; callers must have validated ownership through a parent."""
        return self._one(_with_tree(self._query().filter(Workout.id == workout_id)), workout_id)

    def list(self, user_id: int, plan_id: int, cycle_id: int) -> List[Workout]:
        return (
            _with_tree(self._query().filter(Workout.id.in_(scope_workouts(user_id, plan_id, cycle_id))))
            .order_by(Workout.index.asc(), Workout.id.asc())
            .all()
        )

    def list_by_cycle(self, cycle_id: int) -> List[Workout]:
        return (
            _with_tree(self._query().filter(Workout.workout_cycle_id == cycle_id))
            .order_by(Workout.index.asc(), Workout.id.asc())
            .all()
        )

    def update_fields(self, workout: Workout, values: dict) -> Workout:
        for key, value in values.items():
            setattr(workout, key, value)
        return self.save(workout)

    def update_status(self, workout_id: int, completed: bool, skipped: bool) -> None:
        self._update_by_id(workout_id, {Workout.completed: completed, Workout.skipped: skipped})

    def update_summary(self, workout_id: int, calories: float, active_min: float, rest_min: float) -> None:
        self._update_by_id(
            workout_id,
            {
                Workout.estimated_calories: calories,
                Workout.estimated_active_min: active_min,
                Workout.estimated_rest_min: rest_min,
            },
        )

    def delete(self, workout_id: int) -> None:
        self._delete_by_id(workout_id)
