"""
Workout domain events.

Status events drive the synchronous completion cascade
(set -> exercise -> workout -> cycle). ``WorkoutCompleted`` is raised by a
workout when it first transitions to completed and is delivered to the
async bus after commit.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Optional

EVENT_WORKOUT_SET_STATUS_CHANGED = "workout_set.status_changed"
EVENT_WORKOUT_EXERCISE_STATUS_CHANGED = "workout_exercise.status_changed"
EVENT_WORKOUT_STATUS_CHANGED = "workout.status_changed"
EVENT_WORKOUT_CYCLE_STATUS_CHANGED = "workout_cycle.status_changed"
EVENT_WORKOUT_COMPLETED = "workout.completed"


def new_event_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkoutSetStatusChanged:
    """
    A set under the given exercise changed status (or the set list changed).

    ``workout_set_id`` is None when the change was a bulk one (create,
    delete, complete-whole-exercise); the handler re-derives from counts.
    """

    event_type: ClassVar[str] = EVENT_WORKOUT_SET_STATUS_CHANGED

    user_id: int
    plan_id: int
    cycle_id: int
    workout_id: int
    workout_exercise_id: int
    workout_set_id: Optional[int] = None
    completed: bool = False
    skipped: bool = False
    at: datetime = field(default_factory=utcnow)
    event_id: str = field(default_factory=new_event_id)


@dataclass(frozen=True)
class WorkoutExerciseStatusChanged:
    event_type: ClassVar[str] = EVENT_WORKOUT_EXERCISE_STATUS_CHANGED

    user_id: int
    plan_id: int
    cycle_id: int
    workout_id: int
    workout_exercise_id: Optional[int] = None
    completed: bool = False
    skipped: bool = False
    at: datetime = field(default_factory=utcnow)
    event_id: str = field(default_factory=new_event_id)


@dataclass(frozen=True)
class WorkoutStatusChanged:
    event_type: ClassVar[str] = EVENT_WORKOUT_STATUS_CHANGED

    user_id: int
    plan_id: int
    cycle_id: int
    workout_id: int
    completed: bool = False
    skipped: bool = False
    at: datetime = field(default_factory=utcnow)
    event_id: str = field(default_factory=new_event_id)


@dataclass(frozen=True)
class WorkoutCycleStatusChanged:
    event_type: ClassVar[str] = EVENT_WORKOUT_CYCLE_STATUS_CHANGED

    user_id: int
    plan_id: int
    cycle_id: int
    at: datetime = field(default_factory=utcnow)
    event_id: str = field(default_factory=new_event_id)


@dataclass(frozen=True)
class WorkoutCompleted:
    """
    Raised once per false -> true transition of ``Workout.completed``.

    ``first`` is True when the workout had never been dated, i.e. this is
    the first time it was ever completed.
    """

    event_type: ClassVar[str] = EVENT_WORKOUT_COMPLETED

    user_id: int
    workout_id: int
    at: datetime = field(default_factory=utcnow)
    first: bool = True
    event_id: str = field(default_factory=new_event_id)
