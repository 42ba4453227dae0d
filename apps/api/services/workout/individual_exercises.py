from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.exceptions import ValidationError
from models import IndividualExercise

from .base import WorkoutServiceBase


@dataclass
class IndividualExerciseStats:
    """Best logged set (highest weight x reps) of one individual exercise."""
    individual_exercise_id: int
    weight: float
    reps: int
    workout_id: int
    date: Optional[datetime]

    @property
    def volume(self) -> float:
        return self.weight * self.reps


@dataclass
class HistoryEntry:
    workout_id: int
    date: Optional[datetime]
    weight: float
    reps: int


def _better(row, best) -> bool:
    volume = row.weight * row.reps
    best_volume = best.weight * best.reps
    if volume != best_volume:
        return volume > best_volume
    return row.weight > best.weight


class IndividualExerciseOperations(WorkoutServiceBase):
    def list_individual_exercises(self, user_id: int) -> List[IndividualExercise]:
        return self.uow.do_if_not_in_tx(lambda: self.individual_exercises.list(user_id))

    def get_individual_exercise(self, user_id: int, individual_exercise_id: int) -> IndividualExercise:
        return self.uow.do_if_not_in_tx(lambda: self.individual_exercises.get(user_id, individual_exercise_id))

    def get_or_create_individual_exercise(
        self,
        user_id: int,
        name: Optional[str] = None,
        muscle_group_id: Optional[int] = None,
        exercise_id: Optional[int] = None,
    ) -> IndividualExercise:
        """
        Resolve the user's instance of an exercise, creating it on first use.

        With ``exercise_id`` the catalog entry decides name, muscle group and
        flags. Without it, a custom exercise is matched on (name, muscle
        group) and both are required to create one.
        """

        def run() -> IndividualExercise:
            if exercise_id is not None:
                existing = self.individual_exercises.find_by_exercise(user_id, exercise_id)
                if existing is not None:
                    return existing
                exercise = self.exercises.get(exercise_id)
                # A custom exercise of the same name is adopted and linked to the catalog entry
                by_name = self.individual_exercises.find_by_name(user_id, exercise.name, exercise.muscle_group_id)
                if by_name is not None:
                    self.individual_exercises.link_exercise(by_name.id, exercise)
                    return self.individual_exercises.get(user_id, by_name.id)
                created = self.individual_exercises.create(
                    user_id,
                    exercise.name,
                    muscle_group_id=exercise.muscle_group_id,
                    exercise_id=exercise.id,
                    is_bodyweight=exercise.is_bodyweight,
                    is_time_based=exercise.is_time_based,
                )
                return self.individual_exercises.get(user_id, created.id)

            clean_name = name.strip() if name else ""
            if clean_name:
                existing = self.individual_exercises.find_by_name(user_id, clean_name, muscle_group_id)
                if existing is not None:
                    return existing
            if not clean_name or muscle_group_id is None:
                raise ValidationError("name and muscle group are required for a custom exercise", field="name")
            created = self.individual_exercises.create(user_id, clean_name, muscle_group_id=muscle_group_id)
            return self.individual_exercises.get(user_id, created.id)

        return self.uow.do_if_not_in_tx(run)

    def get_individual_exercise_stats(
        self, user_id: int, individual_exercise_ids: Optional[Iterable[int]] = None
    ) -> Dict[int, IndividualExerciseStats]:
        """Best set per IE, keyed by IE id. IEs without logged sets are absent."""
        ids = list(individual_exercise_ids) if individual_exercise_ids is not None else None

        def run() -> Dict[int, IndividualExerciseStats]:
            best: Dict[int, IndividualExerciseStats] = {}
            for row in self.workout_sets.performance_rows(user_id, ids):
                current = best.get(row.individual_exercise_id)
                if current is None or _better(row, current):
                    best[row.individual_exercise_id] = IndividualExerciseStats(
                        individual_exercise_id=row.individual_exercise_id,
                        weight=row.weight,
                        reps=row.reps,
                        workout_id=row.workout_id,
                        date=row.date,
                    )
            return best

        return self.uow.do_if_not_in_tx(run)

    def get_individual_exercise_history(self, user_id: int, individual_exercise_id: int) -> List[HistoryEntry]:
        """Best set of each workout the IE was logged in, oldest first."""

        def run() -> List[HistoryEntry]:
            self.individual_exercises.get(user_id, individual_exercise_id)
            sessions: Dict[int, HistoryEntry] = {}
            order: List[int] = []
            for row in self.workout_sets.performance_rows(user_id, [individual_exercise_id]):
                current = sessions.get(row.workout_id)
                if current is None:
                    order.append(row.workout_id)
                if current is None or _better(row, current):
                    sessions[row.workout_id] = HistoryEntry(
                        workout_id=row.workout_id, date=row.date, weight=row.weight, reps=row.reps
                    )
            return [sessions[workout_id] for workout_id in order]

        return self.uow.do_if_not_in_tx(run)
