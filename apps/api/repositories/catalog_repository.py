from typing import List, Optional

from models import Exercise, MuscleGroup
from repositories.base import BaseRepository


class ExerciseRepository(BaseRepository):
    model = Exercise
    resource = "Exercise"

    def create(
        self,
        name: str,
        slug: str,
        is_bodyweight: bool = False,
        is_time_based: bool = False,
        muscle_group_id: Optional[int] = None,
    ) -> Exercise:
        return self.add(
            Exercise(
                name=name,
                slug=slug,
                is_bodyweight=is_bodyweight,
                is_time_based=is_time_based,
                muscle_group_id=muscle_group_id,
            )
        )

    def get(self, exercise_id: int) -> Exercise:
        return self._one(self._query().filter(Exercise.id == exercise_id), exercise_id)

    def get_by_slug(self, slug: str) -> Exercise:
        return self._one(self._query().filter(Exercise.slug == slug), slug)

    def list(self, muscle_group_id: Optional[int] = None) -> List[Exercise]:
        query = self._query()
        if muscle_group_id is not None:
            query = query.filter(Exercise.muscle_group_id == muscle_group_id)
        return query.order_by(Exercise.name.asc()).all()

    def update_fields(self, exercise: Exercise, values: dict) -> Exercise:
        for key, value in values.items():
            setattr(exercise, key, value)
        return self.save(exercise)

    def delete(self, exercise_id: int) -> None:
        self._delete_by_id(exercise_id)


class MuscleGroupRepository(BaseRepository):
    model = MuscleGroup
    resource = "Muscle group"

    def create(self, name: str) -> MuscleGroup:
        return self.add(MuscleGroup(name=name))

    def get(self, muscle_group_id: int) -> MuscleGroup:
        return self._one(self._query().filter(MuscleGroup.id == muscle_group_id), muscle_group_id)

    def list(self) -> List[MuscleGroup]:
        return self._query().order_by(MuscleGroup.name.asc()).all()

    def update_name(self, muscle_group: MuscleGroup, name: str) -> MuscleGroup:
        muscle_group.name = name
        return self.save(muscle_group)

    def delete(self, muscle_group_id: int) -> None:
        self._delete_by_id(muscle_group_id)
