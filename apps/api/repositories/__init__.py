"""
Per-entity repositories bound to the unit of work.

Each repository reads the session of the active transaction; none of them
commits. Owned rows are always filtered through an ownership scope
(repositories.scopes) and missing rows raise NotFoundError.
"""
from repositories.catalog_repository import ExerciseRepository, MuscleGroupRepository
from repositories.handler_log_repository import HandlerLogRepository
from repositories.individual_exercise_repository import IndividualExerciseRepository
from repositories.profile_repository import UserProfileRepository
from repositories.workout_cycle_repository import WorkoutCycleRepository
from repositories.workout_exercise_repository import WorkoutExerciseRepository
from repositories.workout_plan_repository import WorkoutPlanRepository
from repositories.workout_repository import WorkoutRepository
from repositories.workout_set_repository import WorkoutSetRepository

__all__ = [
    "ExerciseRepository",
    "HandlerLogRepository",
    "IndividualExerciseRepository",
    "MuscleGroupRepository",
    "UserProfileRepository",
    "WorkoutCycleRepository",
    "WorkoutExerciseRepository",
    "WorkoutPlanRepository",
    "WorkoutRepository",
    "WorkoutSetRepository",
]
