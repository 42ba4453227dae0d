"""
Exercise API Router

- /v1/individual-exercises: the caller's own exercise instances, stats, history
- /v1/exercises, /v1/muscle-groups: the shared catalog (writes are admin only)
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from core.auth import CurrentUser, get_current_user, get_current_user_id, require_admin
from services.container import get_catalog_service, get_workout_service
from services.exercise_catalog import ExerciseCatalogService
from services.workout import WorkoutService
from schemas import (
    ExerciseCreate,
    ExerciseResponse,
    ExerciseUpdate,
    HistoryEntryResponse,
    IndividualExerciseRequest,
    IndividualExerciseResponse,
    IndividualExerciseStatsResponse,
    MuscleGroupCreate,
    MuscleGroupResponse,
    MuscleGroupUpdate,
)

router = APIRouter(prefix="/v1", tags=["Exercises"])


# ============ Individual exercises ============

@router.get("/individual-exercises", response_model=List[IndividualExerciseResponse])
def list_individual_exercises(
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.list_individual_exercises(user_id)


@router.post("/individual-exercises", response_model=IndividualExerciseResponse)
def get_or_create_individual_exercise(
    payload: IndividualExerciseRequest,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Return the caller's instance of an exercise, creating it on first use."""
    return service.get_or_create_individual_exercise(
        user_id,
        name=payload.name,
        muscle_group_id=payload.muscle_group_id,
        exercise_id=payload.exercise_id,
    )


@router.get("/individual-exercises/stats", response_model=List[IndividualExerciseStatsResponse])
def get_individual_exercise_stats(
    ids: Optional[List[int]] = Query(default=None),
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    """Best logged set per individual exercise."""
    stats = service.get_individual_exercise_stats(user_id, ids)
    return sorted(stats.values(), key=lambda s: s.individual_exercise_id)


@router.get("/individual-exercises/{individual_exercise_id}", response_model=IndividualExerciseResponse)
def get_individual_exercise(
    individual_exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_individual_exercise(user_id, individual_exercise_id)


@router.get("/individual-exercises/{individual_exercise_id}/history", response_model=List[HistoryEntryResponse])
def get_individual_exercise_history(
    individual_exercise_id: int,
    user_id: int = Depends(get_current_user_id),
    service: WorkoutService = Depends(get_workout_service),
):
    return service.get_individual_exercise_history(user_id, individual_exercise_id)


# ============ Catalog: exercises ============

@router.get("/exercises", response_model=List[ExerciseResponse])
def list_exercises(
    muscle_group_id: Optional[int] = None,
    current_user: CurrentUser = Depends(get_current_user),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.list_exercises(muscle_group_id)


@router.get("/exercises/{exercise_id}", response_model=ExerciseResponse)
def get_exercise(
    exercise_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.get_exercise(exercise_id)


@router.post("/exercises", response_model=ExerciseResponse, status_code=status.HTTP_201_CREATED)
def create_exercise(
    payload: ExerciseCreate,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.create_exercise(
        payload.name,
        slug=payload.slug,
        is_bodyweight=payload.is_bodyweight,
        is_time_based=payload.is_time_based,
        muscle_group_id=payload.muscle_group_id,
    )


@router.patch("/exercises/{exercise_id}", response_model=ExerciseResponse)
def update_exercise(
    exercise_id: int,
    payload: ExerciseUpdate,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.update_exercise(exercise_id, **payload.model_dump(exclude_unset=True))


@router.delete("/exercises/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exercise(
    exercise_id: int,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    catalog.delete_exercise(exercise_id)


# ============ Catalog: muscle groups ============

@router.get("/muscle-groups", response_model=List[MuscleGroupResponse])
def list_muscle_groups(
    current_user: CurrentUser = Depends(get_current_user),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.list_muscle_groups()


@router.get("/muscle-groups/{muscle_group_id}", response_model=MuscleGroupResponse)
def get_muscle_group(
    muscle_group_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.get_muscle_group(muscle_group_id)


@router.post("/muscle-groups", response_model=MuscleGroupResponse, status_code=status.HTTP_201_CREATED)
def create_muscle_group(
    payload: MuscleGroupCreate,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.create_muscle_group(payload.name)


@router.patch("/muscle-groups/{muscle_group_id}", response_model=MuscleGroupResponse)
def update_muscle_group(
    muscle_group_id: int,
    payload: MuscleGroupUpdate,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    return catalog.update_muscle_group(muscle_group_id, payload.name)


@router.delete("/muscle-groups/{muscle_group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_muscle_group(
    muscle_group_id: int,
    current_user: CurrentUser = Depends(require_admin),
    catalog: ExerciseCatalogService = Depends(get_catalog_service),
):
    catalog.delete_muscle_group(muscle_group_id)
