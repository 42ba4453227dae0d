"""
Workout summary: persists the energy estimate of a workout.

Runs synchronously when a workout becomes completed (so the completion
response carries the estimate) and again from the async ``workout.summary``
handler, which recomputes idempotently from the stored tree.
"""
import logging

from core.unit_of_work import UnitOfWork
from repositories import UserProfileRepository, WorkoutRepository

from .energy import EnergyEstimate, EnergyProfile, estimate_workout_energy

logger = logging.getLogger(__name__)


class WorkoutSummaryService:
    def __init__(self, uow: UnitOfWork, default_weight_kg: float = 70.0, default_age: int = 30):
        self.uow = uow
        self.workouts = WorkoutRepository(uow)
        self.profiles = UserProfileRepository(uow)
        self.default_weight_kg = default_weight_kg
        self.default_age = default_age

    def profile_for(self, user_id: int) -> EnergyProfile:
        profile = self.profiles.find_by_user(user_id)
        if profile is None:
            return EnergyProfile(weight_kg=self.default_weight_kg, age=self.default_age)
        weight = profile.weight_kg if profile.weight_kg and profile.weight_kg > 0 else self.default_weight_kg
        age = profile.age if profile.age is not None else self.default_age
        return EnergyProfile(weight_kg=weight, age=age, sex=profile.sex or "")

    def calculate(self, user_id: int, workout_id: int) -> EnergyEstimate:
        """Recompute and store the estimate for one of the user's workouts."""

        def run() -> EnergyEstimate:
            workout = self.workouts.get(user_id, None, None, workout_id)
            estimate = estimate_workout_energy(workout.workout_exercises, self.profile_for(user_id))
            self.workouts.update_summary(workout.id, estimate.calories, estimate.active_min, estimate.rest_min)
            logger.debug(
                f"Workout {workout_id} summary: {estimate.calories} kcal",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "workout_id": workout_id,
                        "calories": estimate.calories,
                        "active_min": estimate.active_min,
                        "rest_min": estimate.rest_min,
                    }
                },
            )
            return estimate

        return self.uow.do_if_not_in_tx(run)
