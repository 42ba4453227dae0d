"""
Workout Plans API Router

Endpoints for the training tree, nested by ownership path:

    /v1/workout-plans/{plan_id}
        /cycles/{cycle_id}
            /workouts/{workout_id}
                /exercises/{workout_exercise_id}
                    /sets/{workout_set_id}

Every id in the path is checked against the caller; a foreign id is a 404.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List

from core.auth import get_current_user_id
from services.container import get_workout_service
from services.workout import WorkoutDraft, WorkoutExerciseDraft, WorkoutService
from schemas import (
    MoveRequest,
    PreviousSetResponse,
    StatusUpdate,
    WorkoutBatchCreate,
    WorkoutCompletionResponse,
    WorkoutCreate,
    WorkoutCycleCreate,
    WorkoutCycleDetailResponse,
    WorkoutCycleResponse,
    WorkoutCycleUpdate,
    WorkoutExerciseCreate,
    WorkoutExerciseReplace,
    WorkoutExerciseResponse,
    WorkoutPlanActivation,
    WorkoutPlanCreate,
    WorkoutPlanResponse,
    WorkoutPlanUpdate,
    WorkoutResponse,
    WorkoutSetCreate,
    WorkoutSetResponse,
    WorkoutSetUpdate,
    WorkoutSummaryResponse,
    WorkoutUpdate,
)

router = APIRouter(prefix="/v1/workout-plans", tags=["Workout Plans"])

CYCLE = "/{plan_id}/cycles/{cycle_id}"
WORKOUT = CYCLE + "/workouts/{workout_id}"
EXERCISE = WORKOUT + "/exercises/{workout_exercise_id}"
SET = EXERCISE + "/sets/{workout_set_id}"


# ============ Plans ============

@router.post("", response_model=WorkoutPlanResponse, status_code=status.HTTP_201_CREATED)
def create_workout_plan(
    payload: WorkoutPlanCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Create a plan with its first cycle."""
    return service.create_workout_plan(user_id, payload.name, active=payload.active)


@router.get("", response_model=List[WorkoutPlanResponse])
def list_workout_plans(
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_workout_plans(user_id)


@router.get("/active", response_model=WorkoutPlanResponse)
def get_active_plan(
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_active_plan(user_id)


@router.get("/active/current-cycle", response_model=WorkoutCycleDetailResponse)
def get_current_workout_cycle(
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """The active plan's current cycle, materialized from its predecessor on first read."""
    return service.get_current_workout_cycle(user_id)


@router.get("/{plan_id}", response_model=WorkoutPlanResponse)
def get_workout_plan(
    plan_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_workout_plan(user_id, plan_id)


@router.patch("/{plan_id}", response_model=WorkoutPlanResponse)
def update_workout_plan(
    plan_id: int,
    payload: WorkoutPlanUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.update_workout_plan(user_id, plan_id, name=payload.name)


@router.put("/{plan_id}/active", response_model=WorkoutPlanResponse)
def set_active_workout_plan(
    plan_id: int,
    payload: WorkoutPlanActivation,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.set_active_workout_plan(user_id, plan_id, payload.active)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout_plan(
    plan_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout_plan(user_id, plan_id)


# ============ Cycles ============

@router.post("/{plan_id}/cycles", response_model=WorkoutCycleResponse, status_code=status.HTTP_201_CREATED)
def create_workout_cycle(
    plan_id: int,
    payload: WorkoutCycleCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create_workout_cycle(user_id, plan_id, name=payload.name)


@router.get("/{plan_id}/cycles", response_model=List[WorkoutCycleResponse])
def list_workout_cycles(
    plan_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_workout_cycles(user_id, plan_id)


@router.get(CYCLE, response_model=WorkoutCycleDetailResponse)
def get_workout_cycle(
    plan_id: int,
    cycle_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_workout_cycle(user_id, plan_id, cycle_id)


@router.patch(CYCLE, response_model=WorkoutCycleResponse)
def update_workout_cycle(
    plan_id: int,
    cycle_id: int,
    payload: WorkoutCycleUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.update_workout_cycle(user_id, plan_id, cycle_id, name=payload.name)


@router.put(CYCLE + "/status", response_model=WorkoutCycleResponse)
def complete_workout_cycle(
    plan_id: int,
    cycle_id: int,
    payload: StatusUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.complete_workout_cycle(user_id, plan_id, cycle_id, payload.completed, payload.skipped)


@router.delete(CYCLE, status_code=status.HTTP_204_NO_CONTENT)
def delete_workout_cycle(
    plan_id: int,
    cycle_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout_cycle(user_id, plan_id, cycle_id)


# ============ Workouts ============

@router.post(CYCLE + "/workouts", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
def create_workout(
    plan_id: int,
    cycle_id: int,
    payload: WorkoutCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create_workout(user_id, plan_id, cycle_id, payload.name, date=payload.date, index=payload.index)


@router.post(CYCLE + "/workouts/batch", response_model=List[WorkoutResponse], status_code=status.HTTP_201_CREATED)
def create_multiple_workouts(
    plan_id: int,
    cycle_id: int,
    payload: WorkoutBatchCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    drafts = [
        WorkoutDraft(
            name=draft.name,
            date=draft.date,
            exercises=[
                WorkoutExerciseDraft(individual_exercise_id=e.individual_exercise_id, sets_qt=e.sets_qt)
                for e in draft.exercises
            ],
        )
        for draft in payload.workouts
    ]
    return service.create_multiple_workouts(user_id, plan_id, cycle_id, drafts)


@router.get(CYCLE + "/workouts", response_model=List[WorkoutResponse])
def list_workouts(
    plan_id: int,
    cycle_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_workouts(user_id, plan_id, cycle_id)


@router.get(WORKOUT, response_model=WorkoutResponse)
def get_workout(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_workout(user_id, plan_id, cycle_id, workout_id)


@router.patch(WORKOUT, response_model=WorkoutResponse)
def update_workout(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    payload: WorkoutUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.update_workout(user_id, plan_id, cycle_id, workout_id, name=payload.name, date=payload.date)


@router.put(WORKOUT + "/status", response_model=WorkoutCompletionResponse)
def complete_workout(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    payload: StatusUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Complete, skip or reopen a whole workout; returns the calorie estimate."""
    workout, calories = service.complete_workout(
        user_id, plan_id, cycle_id, workout_id, payload.completed, payload.skipped
    )
    return WorkoutCompletionResponse(workout=WorkoutResponse.model_validate(workout), calories=calories)


@router.post(WORKOUT + "/move", response_model=WorkoutResponse)
def move_workout(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    payload: MoveRequest,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.move_workout(user_id, plan_id, cycle_id, workout_id, payload.direction)


@router.post(WORKOUT + "/summary", response_model=WorkoutSummaryResponse)
def calculate_workout_summary(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.calculate_workout_summary(user_id, plan_id, cycle_id, workout_id)


@router.delete(WORKOUT, status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout(user_id, plan_id, cycle_id, workout_id)


# ============ Workout exercises ============

@router.post(WORKOUT + "/exercises", response_model=WorkoutExerciseResponse, status_code=status.HTTP_201_CREATED)
def create_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    payload: WorkoutExerciseCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create_workout_exercise(
        user_id, plan_id, cycle_id, workout_id, payload.individual_exercise_id, payload.sets_qt, index=payload.index
    )


@router.get(WORKOUT + "/exercises", response_model=List[WorkoutExerciseResponse])
def list_workout_exercises(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_workout_exercises(user_id, plan_id, cycle_id, workout_id)


@router.get(EXERCISE, response_model=WorkoutExerciseResponse)
def get_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_workout_exercise(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)


@router.put(EXERCISE + "/status", response_model=WorkoutExerciseResponse)
def complete_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    payload: StatusUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.complete_workout_exercise(
        user_id, plan_id, cycle_id, workout_id, workout_exercise_id, payload.completed, payload.skipped
    )


@router.post(EXERCISE + "/move", response_model=WorkoutExerciseResponse)
def move_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    payload: MoveRequest,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.move_workout_exercise(
        user_id, plan_id, cycle_id, workout_id, workout_exercise_id, payload.direction
    )


@router.put(EXERCISE, response_model=WorkoutExerciseResponse)
def replace_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    payload: WorkoutExerciseReplace,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Replace the exercise at this position; the response carries the new id."""
    return service.replace_workout_exercise(
        user_id, plan_id, cycle_id, workout_id, workout_exercise_id, payload.individual_exercise_id, payload.sets_qt
    )


@router.delete(EXERCISE, status_code=status.HTTP_204_NO_CONTENT)
def delete_workout_exercise(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout_exercise(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)


# ============ Sets ============

@router.post(EXERCISE + "/sets", response_model=WorkoutSetResponse, status_code=status.HTTP_201_CREATED)
def create_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    payload: WorkoutSetCreate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.create_workout_set(
        user_id,
        plan_id,
        cycle_id,
        workout_id,
        workout_exercise_id,
        weight=payload.weight,
        reps=payload.reps,
        index=payload.index,
    )


@router.get(EXERCISE + "/sets", response_model=List[WorkoutSetResponse])
def list_workout_sets(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_workout_sets(user_id, plan_id, cycle_id, workout_id, workout_exercise_id)


@router.get(SET, response_model=WorkoutSetResponse)
def get_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    workout_set_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_workout_set(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)


@router.patch(SET, response_model=WorkoutSetResponse)
def update_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    workout_set_id: int,
    payload: WorkoutSetUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.update_workout_set(
        user_id,
        plan_id,
        cycle_id,
        workout_id,
        workout_exercise_id,
        workout_set_id,
        weight=payload.weight,
        reps=payload.reps,
    )


@router.put(SET + "/status", response_model=WorkoutSetResponse)
def complete_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    workout_set_id: int,
    payload: StatusUpdate,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.complete_workout_set(
        user_id,
        plan_id,
        cycle_id,
        workout_id,
        workout_exercise_id,
        workout_set_id,
        payload.completed,
        payload.skipped,
    )


@router.post(SET + "/move", response_model=WorkoutSetResponse)
def move_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    workout_set_id: int,
    payload: MoveRequest,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.move_workout_set(
        user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id, payload.direction
    )


@router.delete(SET, status_code=status.HTTP_204_NO_CONTENT)
def delete_workout_set(
    plan_id: int,
    cycle_id: int,
    workout_id: int,
    workout_exercise_id: int,
    workout_set_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout_set(user_id, plan_id, cycle_id, workout_id, workout_exercise_id, workout_set_id)


# ============ Carry-over ============

@router.get("/previous-sets/{individual_exercise_id}", response_model=List[PreviousSetResponse])
def get_previous_sets(
    individual_exercise_id: int,
    qt: int = Query(..., ge=1),
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Carry-over values for ``qt`` set positions of an individual exercise."""
    return service.get_previous_sets(user_id, individual_exercise_id, qt)
