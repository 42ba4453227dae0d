from datetime import datetime
from typing import List, Optional

from core.exceptions import NotFoundError
from models import WorkoutPlan
from repositories.base import BaseRepository
from repositories.scopes import scope_plans


class WorkoutPlanRepository(BaseRepository):
    model = WorkoutPlan
    resource = "Workout plan"

    def create(self, user_id: int, name: str) -> WorkoutPlan:
        return self.add(WorkoutPlan(user_id=user_id, name=name, active=False))

    def _owned(self, user_id: int, plan_id: int):
        return self._query().filter(WorkoutPlan.id.in_(scope_plans(user_id, plan_id)))

    def get(self, user_id: int, plan_id: int) -> WorkoutPlan:
        return self._one(self._owned(user_id, plan_id), plan_id)

    def ensure_owned(self, user_id: int, plan_id: int) -> None:
        self._ensure(scope_plans(user_id, plan_id), plan_id)

    def get_for_update(self, user_id: int, plan_id: int) -> WorkoutPlan:
        return self._one(self._owned(user_id, plan_id).with_for_update(), plan_id)

    def lock(self, user_id: int, plan_id: int) -> None:
        self.get_for_update(user_id, plan_id)

    def list(self, user_id: int) -> List[WorkoutPlan]:
        return (
            self._query()
            .filter(WorkoutPlan.id.in_(scope_plans(user_id)))
            .order_by(WorkoutPlan.id.asc())
            .all()
        )

    def get_active(self, user_id: int) -> Optional[WorkoutPlan]:
        return (
            self._query()
            .filter(WorkoutPlan.id.in_(scope_plans(user_id)), WorkoutPlan.active.is_(True))
            .order_by(WorkoutPlan.id.desc())
            .first()
        )

    def update_name(self, user_id: int, plan_id: int, name: str) -> WorkoutPlan:
        plan = self.get_for_update(user_id, plan_id)
        plan.name = name
        return self.save(plan)

    def set_current_cycle(self, plan_id: int, cycle_id: Optional[int]) -> None:
        self._update_by_id(plan_id, {WorkoutPlan.current_cycle_id: cycle_id})

    def set_active(self, plan_id: int, active: bool) -> None:
        self._update_by_id(plan_id, {WorkoutPlan.active: active})

    def deactivate_others(self, user_id: int, keep_id: int) -> int:
        """Clear ``active`` on every other plan of the user."""
        return (
            self.db.query(WorkoutPlan)
            .filter(
                WorkoutPlan.user_id == user_id,
                WorkoutPlan.id != keep_id,
                WorkoutPlan.active.is_(True),
            )
            .update({WorkoutPlan.active: False}, synchronize_session=False)
        )

    def soft_delete(self, user_id: int, plan_id: int, at: datetime) -> None:
        updated = (
            self.db.query(WorkoutPlan)
            .filter(WorkoutPlan.id.in_(scope_plans(user_id, plan_id)))
            .update({WorkoutPlan.deleted_at: at, WorkoutPlan.active: False}, synchronize_session=False)
        )
        if updated == 0:
            raise NotFoundError(self.resource, plan_id)
