from sqlalchemy import Column, Integer, Boolean, Float, DateTime, ForeignKey, Text, Index, UniqueConstraint, PrimaryKeyConstraint, false, true
from sqlalchemy.orm import relationship, reconstructor
from sqlalchemy.sql import func
from core.database import Base
from domain_events import WorkoutCompleted
from typing import List
from datetime import datetime


# =============================================================================
# EXERCISE CATALOG (shared, admin-writable)
# =============================================================================

class MuscleGroup(Base):
    __tablename__ = "muscle_groups"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    slug = Column(Text, nullable=False)
    is_bodyweight = Column(Boolean, default=False, nullable=False)
    is_time_based = Column(Boolean, default=False, nullable=False)
    muscle_group_id = Column(Integer, ForeignKey("muscle_groups.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    muscle_group = relationship("MuscleGroup", lazy="joined")

    __table_args__ = (
        Index("ux_exercises_slug", "slug", unique=True),
        {"sqlite_autoincrement": True},
    )


# =============================================================================
# PER-USER TRAINING TREE
# plan -> cycle -> workout -> workout_exercise -> workout_set
# =============================================================================

class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    user_id = Column(Integer, nullable=False)
    active = Column(Boolean, default=False, nullable=False)
    # Always a cycle of this plan when set
    current_cycle_id = Column(
        Integer,
        ForeignKey("workout_cycles.id", ondelete="SET NULL", use_alter=True, name="fk_workout_plans_current_cycle_id"),
        nullable=True,
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    cycles = relationship(
        "WorkoutCycle",
        back_populates="plan",
        foreign_keys="WorkoutCycle.workout_plan_id",
        order_by="WorkoutCycle.week_number",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_workout_plans_user_id_id", "user_id", "id"),
        {"sqlite_autoincrement": True},
    )


class WorkoutCycle(Base):
    __tablename__ = "workout_cycles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    workout_plan_id = Column(Integer, ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)
    # Doubly linked list of a plan's cycles; null previous marks the head
    previous_cycle_id = Column(Integer, ForeignKey("workout_cycles.id", ondelete="SET NULL"), nullable=True)
    next_cycle_id = Column(Integer, ForeignKey("workout_cycles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    plan = relationship("WorkoutPlan", back_populates="cycles", foreign_keys=[workout_plan_id])
    workouts = relationship(
        "Workout",
        back_populates="cycle",
        order_by="(Workout.index, Workout.id)",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("workout_plan_id", "week_number", name="uq_workout_cycles_plan_week"),
        {"sqlite_autoincrement": True},
    )


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    workout_cycle_id = Column(Integer, ForeignKey("workout_cycles.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime(timezone=True), nullable=True)
    index = Column(Integer, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)
    previous_workout_id = Column(Integer, nullable=True)  # back-reference, not an ownership pointer

    # Summary written by the energy estimator
    estimated_calories = Column(Float, nullable=True)
    estimated_active_min = Column(Float, nullable=True)
    estimated_rest_min = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    cycle = relationship("WorkoutCycle", back_populates="workouts")
    workout_exercises = relationship(
        "WorkoutExercise",
        back_populates="workout",
        order_by="(WorkoutExercise.index, WorkoutExercise.id)",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_workouts_cycle_index", "workout_cycle_id", "index"),
        Index(
            "ix_workouts_cycle_pending", "workout_cycle_id",
            postgresql_where=(completed == false()), sqlite_where=(completed == false()),
        ),
        Index(
            "ix_workouts_cycle_skipped", "workout_cycle_id",
            postgresql_where=(skipped == true()), sqlite_where=(skipped == true()),
        ),
        {"sqlite_autoincrement": True},
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._pending_events = []

    @reconstructor
    def _init_on_load(self):
        self._pending_events = []

    # --- pending events buffer ---

    def raise_event(self, event) -> None:
        self._pending_events.append(event)

    def drain_events(self) -> List:
        events, self._pending_events = self._pending_events, []
        return events

    def clear_events(self) -> None:
        self._pending_events = []

    def complete(self, at: datetime, user_id: int) -> None:
        """
        Mark the workout completed.

        Dates an undated workout and raises WorkoutCompleted only on the
        false -> true transition, so repeated calls are no-ops.
        """
        was_completed = bool(self.completed)
        first = self.date is None
        self.completed = True
        self.skipped = False
        if self.date is None:
            self.date = at
        if not was_completed:
            self.raise_event(WorkoutCompleted(user_id=user_id, workout_id=self.id, at=at, first=first))


class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False)
    index = Column(Integer, nullable=False)
    individual_exercise_id = Column(Integer, ForeignKey("individual_exercises.id", ondelete="CASCADE"), nullable=False)
    previous_exercise_id = Column(Integer, nullable=True)  # carry-over source
    completed = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    workout = relationship("Workout", back_populates="workout_exercises")
    individual_exercise = relationship("IndividualExercise", foreign_keys=[individual_exercise_id])
    workout_sets = relationship(
        "WorkoutSet",
        back_populates="workout_exercise",
        order_by="(WorkoutSet.index, WorkoutSet.id)",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_workout_exercises_workout_index", "workout_id", "index"),
        Index(
            "ix_workout_exercises_workout_pending", "workout_id",
            postgresql_where=(completed == false()), sqlite_where=(completed == false()),
        ),
        Index(
            "ix_workout_exercises_workout_skipped", "workout_id",
            postgresql_where=(skipped == true()), sqlite_where=(skipped == true()),
        ),
        Index("ix_workout_exercises_individual_exercise_id", "individual_exercise_id"),
        {"sqlite_autoincrement": True},
    )


class WorkoutSet(Base):
    __tablename__ = "workout_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_exercise_id = Column(Integer, ForeignKey("workout_exercises.id", ondelete="CASCADE"), nullable=False)
    index = Column(Integer, nullable=False)
    weight = Column(Float, nullable=True)  # kg
    reps = Column(Integer, nullable=True)  # seconds for time-based exercises
    previous_weight = Column(Float, nullable=True)
    previous_reps = Column(Integer, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    workout_exercise = relationship("WorkoutExercise", back_populates="workout_sets")

    __table_args__ = (
        Index("ix_workout_sets_exercise_index", "workout_exercise_id", "index"),
        Index(
            "ix_workout_sets_exercise_pending", "workout_exercise_id",
            postgresql_where=(completed == false()), sqlite_where=(completed == false()),
        ),
        Index(
            "ix_workout_sets_exercise_skipped", "workout_exercise_id",
            postgresql_where=(skipped == true()), sqlite_where=(skipped == true()),
        ),
        Index(
            "ix_workout_sets_exercise_performance", "workout_exercise_id",
            postgresql_where=(reps.isnot(None) & weight.isnot(None)),
            sqlite_where=(reps.isnot(None) & weight.isnot(None)),
        ),
        {"sqlite_autoincrement": True},
    )

    @property
    def pending(self) -> bool:
        return not self.completed and not self.skipped


class IndividualExercise(Base):
    """A user's own instance of a catalog exercise; carries the carry-over pointer."""
    __tablename__ = "individual_exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    name = Column(Text, nullable=False)
    is_bodyweight = Column(Boolean, default=False, nullable=False)
    is_time_based = Column(Boolean, default=False, nullable=False)
    muscle_group_id = Column(Integer, ForeignKey("muscle_groups.id", ondelete="SET NULL"), nullable=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id", ondelete="SET NULL"), nullable=True)
    last_completed_workout_exercise_id = Column(
        Integer,
        ForeignKey(
            "workout_exercises.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_individual_exercises_last_completed_we_id",
        ),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    muscle_group = relationship("MuscleGroup", lazy="joined")
    exercise = relationship("Exercise", lazy="joined")

    __table_args__ = (
        Index("ux_individual_exercises_user_name_muscle_group", "user_id", "name", "muscle_group_id", unique=True),
        Index("ix_individual_exercises_user_exercise", "user_id", "exercise_id"),
        {"sqlite_autoincrement": True},
    )


# =============================================================================
# PROFILE (energy estimator inputs)
# =============================================================================

class UserProfile(Base):
    __tablename__ = "user_profiles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, unique=True)
    weight_kg = Column(Float, nullable=True)
    age = Column(Integer, nullable=True)
    sex = Column(Text, nullable=True)  # 'male' | 'female'
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


# =============================================================================
# IDEMPOTENCY LOG (async handlers)
# =============================================================================

class HandlerLog(Base):
    __tablename__ = "handler_logs"

    handler_name = Column(Text, nullable=False)
    event_type = Column(Text, nullable=False)
    entity_key = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("handler_name", "event_type", "entity_key", name="pk_handler_logs"),
        Index("ix_handler_logs_created_at", "created_at"),
    )
