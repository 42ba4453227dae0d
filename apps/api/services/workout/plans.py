import logging
from typing import List, Optional

from core.exceptions import NotFoundError
from models import WorkoutPlan

from .base import WorkoutServiceBase

logger = logging.getLogger(__name__)

FIRST_CYCLE_NAME = "Week #1"


class PlanOperations(WorkoutServiceBase):
    def create_workout_plan(self, user_id: int, name: str, active: bool = False) -> WorkoutPlan:
        """
        Create a plan together with its first cycle ("Week #1").

        Activating the new plan deactivates every other plan of the user in
        the same transaction.
        """
        name = self._require_name(name)

        def run() -> WorkoutPlan:
            plan = self.plans.create(user_id, name)
            cycle = self.cycles.create(plan.id, FIRST_CYCLE_NAME, 1)
            self.plans.set_current_cycle(plan.id, cycle.id)
            if active:
                self.plans.deactivate_others(user_id, plan.id)
                self.plans.set_active(plan.id, True)

            logger.info(
                f"Workout plan {plan.id} created",
                extra={"extra_fields": {"user_id": user_id, "plan_id": plan.id, "active": bool(active)}},
            )
            return self.plans.get(user_id, plan.id)

        return self.uow.do(run)

    def get_workout_plan(self, user_id: int, plan_id: int) -> WorkoutPlan:
        return self.uow.do_if_not_in_tx(lambda: self.plans.get(user_id, plan_id))

    def list_workout_plans(self, user_id: int) -> List[WorkoutPlan]:
        return self.uow.do_if_not_in_tx(lambda: self.plans.list(user_id))

    def update_workout_plan(self, user_id: int, plan_id: int, name: Optional[str] = None) -> WorkoutPlan:
        def run() -> WorkoutPlan:
            if name is not None:
                self.plans.update_name(user_id, plan_id, self._require_name(name))
            return self.plans.get(user_id, plan_id)

        return self.uow.do(run)

    def set_active_workout_plan(self, user_id: int, plan_id: int, active: bool) -> WorkoutPlan:
        """Locks: workout_plans."""

        def run() -> WorkoutPlan:
            plan = self.plans.get_for_update(user_id, plan_id)
            if active:
                self.plans.deactivate_others(user_id, plan.id)
            self.plans.set_active(plan.id, bool(active))
            return self.plans.get(user_id, plan.id)

        return self.uow.do(run)

    def get_active_plan(self, user_id: int) -> WorkoutPlan:
        def run() -> WorkoutPlan:
            plan = self.plans.get_active(user_id)
            if plan is None:
                raise NotFoundError("Active workout plan")
            return plan

        return self.uow.do_if_not_in_tx(run)

    def delete_workout_plan(self, user_id: int, plan_id: int) -> None:
        """Soft delete: the plan disappears from every scope and loses ``active``."""

        def run() -> None:
            self.plans.soft_delete(user_id, plan_id, self._now())
            logger.info(
                f"Workout plan {plan_id} deleted",
                extra={"extra_fields": {"user_id": user_id, "plan_id": plan_id}},
            )

        self.uow.do(run)
