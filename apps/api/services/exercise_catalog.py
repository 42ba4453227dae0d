"""
Exercise catalog administration.

Exercises and muscle groups are shared by every user; the individual
exercises users train with point at them. Unique collisions (name, slug)
surface as ConflictError from the unit of work.
"""
import logging
import re
from typing import List, Optional

from core.exceptions import ValidationError
from core.unit_of_work import UnitOfWork
from models import Exercise, MuscleGroup
from repositories import ExerciseRepository, MuscleGroupRepository

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    slug = _NON_ALNUM.sub("-", name.strip().lower()).strip("-")
    if not slug:
        raise ValidationError("name must contain letters or digits", field="slug")
    return slug


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


class ExerciseCatalogService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.exercises = ExerciseRepository(uow)
        self.muscle_groups = MuscleGroupRepository(uow)

    # --- exercises ---

    def create_exercise(
        self,
        name: str,
        slug: Optional[str] = None,
        is_bodyweight: bool = False,
        is_time_based: bool = False,
        muscle_group_id: Optional[int] = None,
    ) -> Exercise:
        name = _require(name, "name")
        slug = slugify(slug if slug else name)

        def run() -> Exercise:
            if muscle_group_id is not None:
                self.muscle_groups.get(muscle_group_id)
            exercise = self.exercises.create(
                name,
                slug,
                is_bodyweight=is_bodyweight,
                is_time_based=is_time_based,
                muscle_group_id=muscle_group_id,
            )
            logger.info(
                f"Exercise {exercise.id} created",
                extra={"extra_fields": {"exercise_id": exercise.id, "slug": slug}},
            )
            return self.exercises.get(exercise.id)

        return self.uow.do(run)

    def get_exercise(self, exercise_id: int) -> Exercise:
        return self.uow.do_if_not_in_tx(lambda: self.exercises.get(exercise_id))

    def list_exercises(self, muscle_group_id: Optional[int] = None) -> List[Exercise]:
        return self.uow.do_if_not_in_tx(lambda: self.exercises.list(muscle_group_id))

    def update_exercise(self, exercise_id: int, **fields) -> Exercise:
        values = {key: value for key, value in fields.items() if value is not None}
        if "name" in values:
            values["name"] = _require(values["name"], "name")
        if "slug" in values:
            values["slug"] = slugify(values["slug"])

        def run() -> Exercise:
            exercise = self.exercises.get(exercise_id)
            if values.get("muscle_group_id") is not None:
                self.muscle_groups.get(values["muscle_group_id"])
            if values:
                self.exercises.update_fields(exercise, values)
            return self.exercises.get(exercise_id)

        return self.uow.do(run)

    def delete_exercise(self, exercise_id: int) -> None:
        self.uow.do(lambda: self.exercises.delete(exercise_id))

    # --- muscle groups ---

    def create_muscle_group(self, name: str) -> MuscleGroup:
        name = _require(name, "name")

        def run() -> MuscleGroup:
            muscle_group = self.muscle_groups.create(name)
            return self.muscle_groups.get(muscle_group.id)

        return self.uow.do(run)

    def get_muscle_group(self, muscle_group_id: int) -> MuscleGroup:
        return self.uow.do_if_not_in_tx(lambda: self.muscle_groups.get(muscle_group_id))

    def list_muscle_groups(self) -> List[MuscleGroup]:
        return self.uow.do_if_not_in_tx(self.muscle_groups.list)

    def update_muscle_group(self, muscle_group_id: int, name: str) -> MuscleGroup:
        name = _require(name, "name")

        def run() -> MuscleGroup:
            muscle_group = self.muscle_groups.get(muscle_group_id)
            self.muscle_groups.update_name(muscle_group, name)
            return self.muscle_groups.get(muscle_group_id)

        return self.uow.do(run)

    def delete_muscle_group(self, muscle_group_id: int) -> None:
        self.uow.do(lambda: self.muscle_groups.delete(muscle_group_id))
