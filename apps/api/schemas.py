from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List, Literal


# --- Catalog ---

class MuscleGroupCreate(BaseModel):
    name: str


class MuscleGroupUpdate(BaseModel):
    name: str


class MuscleGroupResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ExerciseCreate(BaseModel):
    name: str
    slug: Optional[str] = None  # derived from the name when absent
    is_bodyweight: bool = False
    is_time_based: bool = False
    muscle_group_id: Optional[int] = None


class ExerciseUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    is_bodyweight: Optional[bool] = None
    is_time_based: Optional[bool] = None
    muscle_group_id: Optional[int] = None


class ExerciseResponse(BaseModel):
    id: int
    name: str
    slug: str
    is_bodyweight: bool
    is_time_based: bool
    muscle_group_id: Optional[int] = None
    muscle_group: Optional[MuscleGroupResponse] = None

    model_config = ConfigDict(from_attributes=True)


# --- Individual exercises ---

class IndividualExerciseRequest(BaseModel):
    """Either a catalog exercise id, or a custom name plus muscle group."""
    exercise_id: Optional[int] = None
    name: Optional[str] = None
    muscle_group_id: Optional[int] = None


class IndividualExerciseResponse(BaseModel):
    id: int
    name: str
    is_bodyweight: bool
    is_time_based: bool
    muscle_group_id: Optional[int] = None
    exercise_id: Optional[int] = None
    last_completed_workout_exercise_id: Optional[int] = None
    muscle_group: Optional[MuscleGroupResponse] = None
    exercise: Optional[ExerciseResponse] = None

    model_config = ConfigDict(from_attributes=True)


class IndividualExerciseStatsResponse(BaseModel):
    individual_exercise_id: int
    weight: float
    reps: int
    volume: float
    workout_id: int
    date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class HistoryEntryResponse(BaseModel):
    workout_id: int
    date: Optional[datetime] = None
    weight: float
    reps: int

    model_config = ConfigDict(from_attributes=True)


# --- Training tree ---

class StatusUpdate(BaseModel):
    """Completed wins when both flags are set."""
    completed: bool = False
    skipped: bool = False


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


class WorkoutSetCreate(BaseModel):
    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    index: Optional[int] = None


class WorkoutSetUpdate(BaseModel):
    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)


class WorkoutSetResponse(BaseModel):
    id: int
    workout_exercise_id: int
    index: int
    weight: Optional[float] = None
    reps: Optional[int] = None  # seconds for time-based exercises
    previous_weight: Optional[float] = None
    previous_reps: Optional[int] = None
    completed: bool
    skipped: bool

    model_config = ConfigDict(from_attributes=True)


class PreviousSetResponse(BaseModel):
    weight: Optional[float] = None
    reps: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutExerciseCreate(BaseModel):
    individual_exercise_id: int
    sets_qt: int
    index: Optional[int] = None


class WorkoutExerciseReplace(BaseModel):
    individual_exercise_id: int
    sets_qt: int


class WorkoutExerciseResponse(BaseModel):
    id: int
    workout_id: int
    index: int
    individual_exercise_id: int
    previous_exercise_id: Optional[int] = None
    completed: bool
    skipped: bool
    individual_exercise: Optional[IndividualExerciseResponse] = None
    workout_sets: List[WorkoutSetResponse] = []

    model_config = ConfigDict(from_attributes=True)


class WorkoutCreate(BaseModel):
    name: str
    date: Optional[datetime] = None
    index: Optional[int] = None


class WorkoutExerciseDraftRequest(BaseModel):
    individual_exercise_id: int
    sets_qt: int


class WorkoutDraftRequest(BaseModel):
    name: str
    date: Optional[datetime] = None
    exercises: List[WorkoutExerciseDraftRequest] = []


class WorkoutBatchCreate(BaseModel):
    workouts: List[WorkoutDraftRequest]


class WorkoutUpdate(BaseModel):
    name: Optional[str] = None
    date: Optional[datetime] = None


class WorkoutResponse(BaseModel):
    id: int
    name: str
    workout_cycle_id: int
    date: Optional[datetime] = None
    index: int
    completed: bool
    skipped: bool
    previous_workout_id: Optional[int] = None
    estimated_calories: Optional[float] = None
    estimated_active_min: Optional[float] = None
    estimated_rest_min: Optional[float] = None
    workout_exercises: List[WorkoutExerciseResponse] = []

    model_config = ConfigDict(from_attributes=True)


class WorkoutCompletionResponse(BaseModel):
    """Completion result; calories are 0 unless the workout ended completed."""
    workout: WorkoutResponse
    calories: float


class WorkoutSummaryResponse(BaseModel):
    calories: float
    active_min: float
    rest_min: float

    model_config = ConfigDict(from_attributes=True)


class WorkoutCycleCreate(BaseModel):
    name: Optional[str] = None


class WorkoutCycleUpdate(BaseModel):
    name: Optional[str] = None


class WorkoutCycleResponse(BaseModel):
    id: int
    name: str
    workout_plan_id: int
    week_number: int
    completed: bool
    skipped: bool
    previous_cycle_id: Optional[int] = None
    next_cycle_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutCycleDetailResponse(WorkoutCycleResponse):
    workouts: List[WorkoutResponse] = []


class WorkoutPlanCreate(BaseModel):
    name: str
    active: bool = False


class WorkoutPlanUpdate(BaseModel):
    name: Optional[str] = None


class WorkoutPlanActivation(BaseModel):
    active: bool


class WorkoutPlanResponse(BaseModel):
    id: int
    name: str
    active: bool
    current_cycle_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
