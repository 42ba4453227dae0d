# Workout domain
#
# Training tree operations (plan -> cycle -> workout -> exercise -> set),
# the completion cascade that derives parent status from child counts,
# and the energy estimator behind workout summaries.

from .base import DIRECTION_DOWN, DIRECTION_UP, PreviousSet
from .completion import CompletionCascade, resolve_completion
from .cycles import cycle_name
from .energy import EnergyEstimate, EnergyProfile, estimate_workout_energy
from .idempotency import try_process
from .individual_exercises import HistoryEntry, IndividualExerciseStats
from .service import WorkoutService
from .summary import WorkoutSummaryService
from .workouts import WorkoutDraft, WorkoutExerciseDraft

__all__ = [
    # Service
    'WorkoutService',
    'WorkoutSummaryService',
    'CompletionCascade',

    # Value objects
    'PreviousSet',
    'WorkoutDraft',
    'WorkoutExerciseDraft',
    'IndividualExerciseStats',
    'HistoryEntry',
    'EnergyEstimate',
    'EnergyProfile',

    # Helpers
    'DIRECTION_UP',
    'DIRECTION_DOWN',
    'cycle_name',
    'resolve_completion',
    'estimate_workout_energy',
    'try_process',
]
