"""
WorkoutService: the use-case surface of the training tree.

Each operation takes the authenticated user id and the full parent path of
its target. Mutating operations run in their own unit of work; reads join
an ambient transaction when one is open.
"""
from .cycles import CycleOperations
from .exercises import WorkoutExerciseOperations
from .individual_exercises import IndividualExerciseOperations
from .plans import PlanOperations
from .sets import WorkoutSetOperations
from .workouts import WorkoutOperations


class WorkoutService(
    PlanOperations,
    CycleOperations,
    WorkoutOperations,
    WorkoutExerciseOperations,
    WorkoutSetOperations,
    IndividualExerciseOperations,
):
    pass
