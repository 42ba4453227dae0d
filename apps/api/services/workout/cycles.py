import logging
from datetime import timedelta
from typing import List, Optional

from core.exceptions import NotFoundError, PreconditionError
from domain_events import WorkoutCycleStatusChanged
from models import Workout, WorkoutCycle

from .base import WorkoutServiceBase

logger = logging.getLogger(__name__)


def cycle_name(week_number: int) -> str:
    return f"Week #{week_number}"


class CycleOperations(WorkoutServiceBase):
    def create_workout_cycle(self, user_id: int, plan_id: int, name: Optional[str] = None) -> WorkoutCycle:
        """
        Append a cycle after the plan's tail with the next week number.

        Locks: workout_plans, workout_cycles (tail).
        """

        def run() -> WorkoutCycle:
            plan = self.plans.get_for_update(user_id, plan_id)
            tail = self.cycles.get_tail_for_update(plan.id)
            week_number = self.cycles.get_max_week_number(plan.id) + 1
            cycle = self.cycles.create(
                plan.id,
                self._require_name(name) if name is not None else cycle_name(week_number),
                week_number,
                previous_cycle_id=tail.id if tail else None,
            )
            if tail is not None:
                self.cycles.set_next(tail.id, cycle.id)
            if plan.current_cycle_id is None:
                self.plans.set_current_cycle(plan.id, cycle.id)
            return self.cycles.get(user_id, plan.id, cycle.id)

        return self.uow.do(run)

    def get_workout_cycle(self, user_id: int, plan_id: int, cycle_id: int) -> WorkoutCycle:
        """
        Read a cycle with its workouts.

        A cycle that has no workouts of its own but follows a cycle that has
        some is materialized first: the predecessor's workouts are deep-cloned
        with carry-over back-pointers. Locks: workout_cycles.
        """

        def run() -> WorkoutCycle:
            cycle = self.cycles.get(user_id, plan_id, cycle_id)
            if cycle.workouts or cycle.previous_cycle_id is None:
                return cycle

            self.cycles.lock(user_id, plan_id, cycle_id)
            if self.workouts.count_total(cycle.id) > 0:
                return self.cycles.get(user_id, plan_id, cycle_id)

            # The lock re-read resets the loaded collections; always return a fresh read
            sources = self.workouts.list_by_cycle(cycle.previous_cycle_id)
            if not sources:
                return self.cycles.get(user_id, plan_id, cycle_id)

            self._clone_workouts(cycle.id, sources)
            self._emit(
                WorkoutCycleStatusChanged(
                    user_id=user_id, plan_id=cycle.workout_plan_id, cycle_id=cycle.id, at=self._now()
                )
            )
            logger.info(
                f"Cycle {cycle.id} materialized from cycle {cycle.previous_cycle_id}",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "cycle_id": cycle.id,
                        "source_cycle_id": cycle.previous_cycle_id,
                        "workouts": len(sources),
                    }
                },
            )
            return self.cycles.get(user_id, plan_id, cycle_id)

        return self.uow.do_if_not_in_tx(run)

    def _clone_workouts(self, cycle_id: int, sources: List[Workout]) -> None:
        now = self._now()
        for source in sources:
            workout = self.workouts.create(
                cycle_id,
                source.name,
                source.index,
                date=now + timedelta(days=source.index),
                previous_workout_id=source.id,
            )
            for source_we in source.workout_exercises:
                we = self.workout_exercises.create(
                    workout.id,
                    source_we.index,
                    source_we.individual_exercise_id,
                    previous_exercise_id=source_we.id,
                )
                for source_set in source_we.workout_sets:
                    self.workout_sets.create(
                        we.id,
                        source_set.index,
                        previous_weight=(
                            source_set.weight if source_set.weight is not None else source_set.previous_weight
                        ),
                        previous_reps=source_set.reps if source_set.reps is not None else source_set.previous_reps,
                    )

    def list_workout_cycles(self, user_id: int, plan_id: int) -> List[WorkoutCycle]:
        def run() -> List[WorkoutCycle]:
            self.plans.ensure_owned(user_id, plan_id)
            return self.cycles.list(user_id, plan_id)

        return self.uow.do_if_not_in_tx(run)

    def update_workout_cycle(self, user_id: int, plan_id: int, cycle_id: int, name: Optional[str] = None) -> WorkoutCycle:
        def run() -> WorkoutCycle:
            cycle = self.cycles.get_for_update(user_id, plan_id, cycle_id)
            if name is not None:
                self.cycles.update_name(cycle, self._require_name(name))
            return self.cycles.get(user_id, plan_id, cycle_id)

        return self.uow.do(run)

    def complete_workout_cycle(
        self,
        user_id: int,
        plan_id: int,
        cycle_id: int,
        completed: bool,
        skipped: bool = False,
    ) -> WorkoutCycle:
        """
        Set the cycle's flags and advance the plan when the current cycle ends.

        Skipping a cycle ends it too (completed and skipped). When the
        completed cycle is the plan's current one, ``current_cycle_id`` moves
        to its successor, which is created ("Week #k+1") if it does not exist.
        Uncompleting only rewrites this cycle's flags.

        Locks: workout_plans, workout_cycles.
        """
        if completed:
            flags = (True, False)
        elif skipped:
            flags = (True, True)
        else:
            flags = (False, False)

        def run() -> WorkoutCycle:
            plan = self.plans.get_for_update(user_id, plan_id)
            cycle = self.cycles.get_for_update(user_id, plan.id, cycle_id)
            self.cycles.update_status(cycle.id, *flags)

            if flags[0] and plan.current_cycle_id == cycle.id:
                if cycle.next_cycle_id is not None:
                    self.plans.set_current_cycle(plan.id, cycle.next_cycle_id)
                else:
                    week_number = max(cycle.week_number, self.cycles.get_max_week_number(plan.id)) + 1
                    successor = self.cycles.create(
                        plan.id, cycle_name(week_number), week_number, previous_cycle_id=cycle.id
                    )
                    self.cycles.set_next(cycle.id, successor.id)
                    self.plans.set_current_cycle(plan.id, successor.id)
                    logger.info(
                        f"Cycle {successor.id} created after cycle {cycle.id}",
                        extra={
                            "extra_fields": {
                                "user_id": user_id,
                                "plan_id": plan.id,
                                "cycle_id": successor.id,
                                "week_number": week_number,
                            }
                        },
                    )

            logger.info(
                f"Cycle {cycle.id} status set",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "plan_id": plan.id,
                        "cycle_id": cycle.id,
                        "completed": flags[0],
                        "skipped": flags[1],
                    }
                },
            )
            return self.cycles.get(user_id, plan.id, cycle.id)

        return self.uow.do(run)

    def delete_workout_cycle(self, user_id: int, plan_id: int, cycle_id: int) -> None:
        """
        Delete a cycle and bridge the plan's cycle list around it.

        The first cycle cannot be deleted. Middle deletion links previous and
        next to each other; tail deletion reopens the previous cycle. IE
        carry-over pointers into the deleted exercises are moved back to each
        exercise's own source first.

        Locks: workout_plans, workout_cycles (previous, target, next).
        """

        def run() -> None:
            plan = self.plans.get_for_update(user_id, plan_id)
            cycle = self.cycles.get_for_update(user_id, plan.id, cycle_id)
            if cycle.previous_cycle_id is None:
                raise PreconditionError("the first cycle of a plan cannot be deleted")

            previous = self.cycles.get_by_id_for_update(cycle.previous_cycle_id)
            following = (
                self.cycles.get_by_id_for_update(cycle.next_cycle_id)
                if cycle.next_cycle_id is not None
                else None
            )

            self._rewire_individual_exercises(user_id, self.workout_exercises.list_by_cycle(cycle.id))

            if following is not None:
                self.cycles.set_next(previous.id, following.id)
                self.cycles.set_previous(following.id, previous.id)
                if plan.current_cycle_id == cycle.id:
                    self.plans.set_current_cycle(plan.id, following.id)
            else:
                self.cycles.set_next(previous.id, None)
                self.cycles.update_status(previous.id, False, False)
                if plan.current_cycle_id == cycle.id:
                    self.plans.set_current_cycle(plan.id, previous.id)

            self.cycles.delete(cycle.id)
            logger.info(
                f"Cycle {cycle.id} deleted",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "plan_id": plan.id,
                        "cycle_id": cycle.id,
                        "tail": following is None,
                    }
                },
            )

        self.uow.do(run)

    def get_current_workout_cycle(self, user_id: int) -> WorkoutCycle:
        """The active plan's current cycle, materialized like ``get_workout_cycle``."""

        def run() -> WorkoutCycle:
            plan = self.plans.get_active(user_id)
            if plan is None:
                raise NotFoundError("Active workout plan")
            if plan.current_cycle_id is None:
                raise NotFoundError("Workout cycle")
            return self.get_workout_cycle(user_id, plan.id, plan.current_cycle_id)

        return self.uow.do_if_not_in_tx(run)
