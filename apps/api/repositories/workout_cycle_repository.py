from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from models import Workout, WorkoutCycle, WorkoutExercise
from repositories.base import BaseRepository
from repositories.scopes import scope_cycles


class WorkoutCycleRepository(BaseRepository):
    model = WorkoutCycle
    resource = "Workout cycle"

    def create(
        self,
        plan_id: int,
        name: str,
        week_number: int,
        previous_cycle_id: Optional[int] = None,
    ) -> WorkoutCycle:
        return self.add(
            WorkoutCycle(
                workout_plan_id=plan_id,
                name=name,
                week_number=week_number,
                previous_cycle_id=previous_cycle_id,
                completed=False,
                skipped=False,
            )
        )

    def _owned(self, user_id: int, plan_id: Optional[int], cycle_id: Optional[int]):
        return self._query().filter(WorkoutCycle.id.in_(scope_cycles(user_id, plan_id, cycle_id)))

    def get(self, user_id: int, plan_id: int, cycle_id: int) -> WorkoutCycle:
        """Cycle with its workouts (ordered by index, then id) and their exercises."""
        query = self._owned(user_id, plan_id, cycle_id).options(
            selectinload(WorkoutCycle.workouts)
            .selectinload(Workout.workout_exercises)
            .selectinload(WorkoutExercise.workout_sets),
            selectinload(WorkoutCycle.workouts)
            .selectinload(Workout.workout_exercises)
            .selectinload(WorkoutExercise.individual_exercise),
        )
        return self._one(query, cycle_id)

    def ensure_owned(self, user_id: int, plan_id: Optional[int], cycle_id: int) -> None:
        self._ensure(scope_cycles(user_id, plan_id, cycle_id), cycle_id)

    def get_for_update(self, user_id: int, plan_id: Optional[int], cycle_id: int) -> WorkoutCycle:
        return self._one(self._owned(user_id, plan_id, cycle_id).with_for_update(), cycle_id)

    def lock(self, user_id: int, plan_id: Optional[int], cycle_id: int) -> None:
        self.get_for_update(user_id, plan_id, cycle_id)

    def get_by_id(self, cycle_id: int) -> WorkoutCycle:
        """Unscoped read; callers must have validated ownership through a parent."""
        return self._one(self._query().filter(WorkoutCycle.id == cycle_id), cycle_id)

    def get_by_id_for_update(self, cycle_id: int) -> WorkoutCycle:
        return self._one(self._query().filter(WorkoutCycle.id == cycle_id).with_for_update(), cycle_id)

    def list(self, user_id: int, plan_id: int) -> List[WorkoutCycle]:
        return (
            self._query()
            .filter(WorkoutCycle.id.in_(scope_cycles(user_id, plan_id)))
            .order_by(WorkoutCycle.week_number.asc(), WorkoutCycle.id.asc())
            .all()
        )

    def get_tail_for_update(self, plan_id: int) -> Optional[WorkoutCycle]:
        return (
            self._query()
            .filter(WorkoutCycle.workout_plan_id == plan_id, WorkoutCycle.next_cycle_id.is_(None))
            .order_by(WorkoutCycle.week_number.desc(), WorkoutCycle.id.desc())
            .with_for_update()
            .first()
        )

    def get_max_week_number(self, plan_id: int) -> int:
        value = (
            self.db.query(func.coalesce(func.max(WorkoutCycle.week_number), 0))
            .filter(WorkoutCycle.workout_plan_id == plan_id)
            .scalar()
        )
        return int(value or 0)

    def update_name(self, cycle: WorkoutCycle, name: str) -> WorkoutCycle:
        cycle.name = name
        return self.save(cycle)

    def update_status(self, cycle_id: int, completed: bool, skipped: bool) -> None:
        self._update_by_id(cycle_id, {WorkoutCycle.completed: completed, WorkoutCycle.skipped: skipped})

    def set_next(self, cycle_id: int, next_cycle_id: Optional[int]) -> None:
        self._update_by_id(cycle_id, {WorkoutCycle.next_cycle_id: next_cycle_id})

    def set_previous(self, cycle_id: int, previous_cycle_id: Optional[int]) -> None:
        self._update_by_id(cycle_id, {WorkoutCycle.previous_cycle_id: previous_cycle_id})

    def delete(self, cycle_id: int) -> None:
        self._delete_by_id(cycle_id)
