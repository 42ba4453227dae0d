"""
Ownership subqueries.

Each scope returns ``select(<entity>.id)`` joined up the parent chain to
``workout_plans.user_id``. Every read and write on an owned row composes
with exactly one of them (``Model.id.in_(scope)``), so a row that exists but
belongs to someone else is indistinguishable from a missing one.

Parent ids are optional: pass the full path from the request, or only the
user id when the caller reaches a row through a back-reference.
"""
from typing import Optional

from sqlalchemy import Select, select

from models import Workout, WorkoutCycle, WorkoutExercise, WorkoutPlan, WorkoutSet


def _owned_plan(query: Select, user_id: int, plan_id: Optional[int]) -> Select:
    query = query.where(WorkoutPlan.user_id == user_id, WorkoutPlan.deleted_at.is_(None))
    if plan_id is not None:
        query = query.where(WorkoutPlan.id == plan_id)
    return query


def scope_plans(user_id: int, plan_id: Optional[int] = None) -> Select:
    return _owned_plan(select(WorkoutPlan.id), user_id, plan_id)


def scope_cycles(
    user_id: int,
    plan_id: Optional[int] = None,
    cycle_id: Optional[int] = None,
) -> Select:
    query = select(WorkoutCycle.id).join(WorkoutPlan, WorkoutPlan.id == WorkoutCycle.workout_plan_id)
    query = _owned_plan(query, user_id, plan_id)
    if cycle_id is not None:
        query = query.where(WorkoutCycle.id == cycle_id)
    return query


def scope_workouts(
    user_id: int,
    plan_id: Optional[int] = None,
    cycle_id: Optional[int] = None,
    workout_id: Optional[int] = None,
) -> Select:
    query = (
        select(Workout.id)
        .join(WorkoutCycle, WorkoutCycle.id == Workout.workout_cycle_id)
        .join(WorkoutPlan, WorkoutPlan.id == WorkoutCycle.workout_plan_id)
    )
    query = _owned_plan(query, user_id, plan_id)
    if cycle_id is not None:
        query = query.where(WorkoutCycle.id == cycle_id)
    if workout_id is not None:
        query = query.where(Workout.id == workout_id)
    return query


def scope_workout_exercises(
    user_id: int,
    plan_id: Optional[int] = None,
    cycle_id: Optional[int] = None,
    workout_id: Optional[int] = None,
    workout_exercise_id: Optional[int] = None,
) -> Select:
    query = (
        select(WorkoutExercise.id)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .join(WorkoutCycle, WorkoutCycle.id == Workout.workout_cycle_id)
        .join(WorkoutPlan, WorkoutPlan.id == WorkoutCycle.workout_plan_id)
    )
    query = _owned_plan(query, user_id, plan_id)
    if cycle_id is not None:
        query = query.where(WorkoutCycle.id == cycle_id)
    if workout_id is not None:
        query = query.where(Workout.id == workout_id)
    if workout_exercise_id is not None:
        query = query.where(WorkoutExercise.id == workout_exercise_id)
    return query


def scope_workout_sets(
    user_id: int,
    plan_id: Optional[int] = None,
    cycle_id: Optional[int] = None,
    workout_id: Optional[int] = None,
    workout_exercise_id: Optional[int] = None,
    workout_set_id: Optional[int] = None,
) -> Select:
    query = (
        select(WorkoutSet.id)
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .join(WorkoutCycle, WorkoutCycle.id == Workout.workout_cycle_id)
        .join(WorkoutPlan, WorkoutPlan.id == WorkoutCycle.workout_plan_id)
    )
    query = _owned_plan(query, user_id, plan_id)
    if cycle_id is not None:
        query = query.where(WorkoutCycle.id == cycle_id)
    if workout_id is not None:
        query = query.where(Workout.id == workout_id)
    if workout_exercise_id is not None:
        query = query.where(WorkoutExercise.id == workout_exercise_id)
    if workout_set_id is not None:
        query = query.where(WorkoutSet.id == workout_set_id)
    return query
