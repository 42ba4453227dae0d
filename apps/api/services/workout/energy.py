"""
Workout Energy Estimator

Estimates calories, active minutes and rest minutes for a workout from its
completed exercises using MET values (ACSM: kcal/min = 0.0175 * MET * kg).

Per completed exercise:
- rest after every set: 105s for resistance work, 60s for time-based work
- active time per set: time-based sets log seconds in ``reps``; rep-based
  sets take 3s per rep; never below 15s
- MET per set:
    time-based: 5.0, 5.5 from 20s, 6.0 from 45s
    rep-based:  4 / 5 / 6 by weight-to-bodyweight ratio (<0.3, <0.6, else),
                +0.5 for 12+ reps
  clamped to [3, 9]
- kcal = 0.0175 * avgMET * kg * activeMin + 0.0175 * 1.8 * kg * restMin,
  then x1.1 (overhead) and x1.2 (EPOC)

The workout total is the sum over exercises, adjusted for age and sex and
rounded to 0.1.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

KCAL_PER_MET_KG_MIN = 0.0175
REST_MET = 1.8
OVERHEAD_FACTOR = 1.1
EPOC_FACTOR = 1.2

REST_SECONDS_RESISTANCE = 105
REST_SECONDS_TIME_BASED = 60
SECONDS_PER_REP = 3
MIN_ACTIVE_SECONDS = 15

MET_MIN = 3.0
MET_MAX = 9.0


@dataclass(frozen=True)
class EnergyProfile:
    """Body data the estimate depends on."""
    weight_kg: float
    age: Optional[int] = None
    sex: str = ""


@dataclass(frozen=True)
class EnergyEstimate:
    calories: float = 0.0
    active_min: float = 0.0
    rest_min: float = 0.0


def round_tenth(value: float) -> float:
    """Round half away from zero to one decimal place."""
    scaled = value * 10
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 10.0


def set_active_seconds(reps: Optional[int], time_based: bool) -> float:
    reps = reps or 0
    seconds = reps if time_based else reps * SECONDS_PER_REP
    return float(max(seconds, MIN_ACTIVE_SECONDS))


def set_met(weight: Optional[float], reps: Optional[int], time_based: bool, user_weight_kg: float) -> float:
    reps = reps or 0
    if time_based:
        if reps >= 45:
            met = 6.0
        elif reps >= 20:
            met = 5.5
        else:
            met = 5.0
    else:
        ratio = (weight or 0.0) / user_weight_kg if user_weight_kg > 0 else 0.0
        if ratio < 0.3:
            met = 4.0
        elif ratio < 0.6:
            met = 5.0
        else:
            met = 6.0
        if reps >= 12:
            met += 0.5
    return min(max(met, MET_MIN), MET_MAX)


def estimate_exercise_energy(sets: Iterable, time_based: bool, user_weight_kg: float) -> Tuple[float, float, float]:
    """
    Energy for one exercise.

    ``sets`` are objects with ``weight``, ``reps`` and ``skipped``; skipped
    sets are ignored. Returns ``(kcal, active_min, rest_min)`` unrounded.
    """
    performed = [s for s in sets if s is not None and not s.skipped]
    if not performed:
        return 0.0, 0.0, 0.0

    rest_seconds = REST_SECONDS_TIME_BASED if time_based else REST_SECONDS_RESISTANCE
    active_sec = sum(set_active_seconds(s.reps, time_based) for s in performed)
    rest_sec = float(rest_seconds * len(performed))
    avg_met = sum(set_met(s.weight, s.reps, time_based, user_weight_kg) for s in performed) / len(performed)

    active_min = active_sec / 60.0
    rest_min = rest_sec / 60.0
    kcal = (
        KCAL_PER_MET_KG_MIN * avg_met * user_weight_kg * active_min
        + KCAL_PER_MET_KG_MIN * REST_MET * user_weight_kg * rest_min
    )
    kcal *= OVERHEAD_FACTOR
    kcal *= EPOC_FACTOR
    return kcal, active_min, rest_min


def adjust_calories_for_user(kcal: float, age: Optional[int], sex: str) -> float:
    if age is not None:
        if age < 25:
            kcal *= 1.05
        elif age > 50:
            kcal *= 0.90
    sex = (sex or "").strip().lower()
    if sex in ("male", "m"):
        kcal *= 1.05
    elif sex in ("female", "f"):
        kcal *= 0.95
    return kcal


def estimate_workout_energy(workout_exercises: Iterable, profile: EnergyProfile) -> EnergyEstimate:
    """
    Energy for a whole workout.

    Only exercises that are completed and not skipped count. Each exercise
    needs ``workout_sets`` and ``individual_exercise`` loaded; a missing
    individual exercise is treated as rep-based.
    """
    total_kcal = 0.0
    total_active = 0.0
    total_rest = 0.0

    for we in workout_exercises:
        if we is None or we.skipped or not we.completed:
            continue
        ie = we.individual_exercise
        time_based = bool(ie.is_time_based) if ie is not None else False
        kcal, active_min, rest_min = estimate_exercise_energy(we.workout_sets, time_based, profile.weight_kg)
        total_kcal += kcal
        total_active += active_min
        total_rest += rest_min

    total_kcal = adjust_calories_for_user(total_kcal, profile.age, profile.sex)
    return EnergyEstimate(
        calories=round_tenth(total_kcal),
        active_min=round_tenth(total_active),
        rest_min=round_tenth(total_rest),
    )
