from typing import List, Optional

from core.exceptions import IndividualExerciseNotFoundError
from models import IndividualExercise
from repositories.base import BaseRepository


class IndividualExerciseRepository(BaseRepository):
    model = IndividualExercise
    resource = "Individual exercise"

    def create(
        self,
        user_id: int,
        name: str,
        muscle_group_id: Optional[int] = None,
        exercise_id: Optional[int] = None,
        is_bodyweight: bool = False,
        is_time_based: bool = False,
    ) -> IndividualExercise:
        return self.add(
            IndividualExercise(
                user_id=user_id,
                name=name,
                muscle_group_id=muscle_group_id,
                exercise_id=exercise_id,
                is_bodyweight=is_bodyweight,
                is_time_based=is_time_based,
            )
        )

    def _owned(self, user_id: int):
        return self._query().filter(IndividualExercise.user_id == user_id)

    def get(self, user_id: int, individual_exercise_id: int) -> IndividualExercise:
        row = self._owned(user_id).filter(IndividualExercise.id == individual_exercise_id).one_or_none()
        if row is None:
            raise IndividualExerciseNotFoundError(individual_exercise_id)
        return row

    def get_for_update(self, user_id: int, individual_exercise_id: int) -> IndividualExercise:
        row = (
            self._owned(user_id)
            .filter(IndividualExercise.id == individual_exercise_id)
            .with_for_update()
            .one_or_none()
        )
        if row is None:
            raise IndividualExerciseNotFoundError(individual_exercise_id)
        return row

    def find_by_exercise(self, user_id: int, exercise_id: int) -> Optional[IndividualExercise]:
        return (
            self._owned(user_id)
            .filter(IndividualExercise.exercise_id == exercise_id)
            .order_by(IndividualExercise.id.asc())
            .first()
        )

    def find_by_name(self, user_id: int, name: str, muscle_group_id: Optional[int]) -> Optional[IndividualExercise]:
        query = self._owned(user_id).filter(IndividualExercise.name == name)
        if muscle_group_id is None:
            query = query.filter(IndividualExercise.muscle_group_id.is_(None))
        else:
            query = query.filter(IndividualExercise.muscle_group_id == muscle_group_id)
        return query.order_by(IndividualExercise.id.asc()).first()

    def list(self, user_id: int) -> List[IndividualExercise]:
        return self._owned(user_id).order_by(IndividualExercise.name.asc(), IndividualExercise.id.asc()).all()

    def link_exercise(self, individual_exercise_id: int, exercise) -> None:
        """Attach a catalog exercise and take over its flags."""
        self._update_by_id(
            individual_exercise_id,
            {
                IndividualExercise.exercise_id: exercise.id,
                IndividualExercise.is_bodyweight: bool(exercise.is_bodyweight),
                IndividualExercise.is_time_based: bool(exercise.is_time_based),
            },
        )

    def set_last_completed(self, individual_exercise_id: int, workout_exercise_id: Optional[int]) -> None:
        self._update_by_id(
            individual_exercise_id,
            {IndividualExercise.last_completed_workout_exercise_id: workout_exercise_id},
        )

    def rewire_last_completed(self, user_id: int, from_id: int, to_id: Optional[int]) -> int:
        """Point every IE that names ``from_id`` as its last completed exercise at ``to_id``."""
        return (
            self.db.query(IndividualExercise)
            .filter(
                IndividualExercise.user_id == user_id,
                IndividualExercise.last_completed_workout_exercise_id == from_id,
            )
            .update(
                {IndividualExercise.last_completed_workout_exercise_id: to_id},
                synchronize_session=False,
            )
        )
