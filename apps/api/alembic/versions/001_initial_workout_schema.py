"""initial workout schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # Exercise catalog
    op.create_table(
        'muscle_groups',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('is_bodyweight', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_time_based', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('muscle_group_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['muscle_group_id'], ['muscle_groups.id'], ondelete='SET NULL'),
    )
    op.create_index('ux_exercises_slug', 'exercises', ['slug'], unique=True)

    # Training tree
    op.create_table(
        'workout_plans',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('current_cycle_id', sa.Integer(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_workout_plans_user_id_id', 'workout_plans', ['user_id', 'id'])

    op.create_table(
        'workout_cycles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('workout_plan_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('skipped', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('previous_cycle_id', sa.Integer(), nullable=True),
        sa.Column('next_cycle_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['workout_plan_id'], ['workout_plans.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['previous_cycle_id'], ['workout_cycles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['next_cycle_id'], ['workout_cycles.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('workout_plan_id', 'week_number', name='uq_workout_cycles_plan_week'),
    )
    op.create_foreign_key(
        'fk_workout_plans_current_cycle_id', 'workout_plans', 'workout_cycles',
        ['current_cycle_id'], ['id'], ondelete='SET NULL',
    )

    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('workout_cycle_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('skipped', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('previous_workout_id', sa.Integer(), nullable=True),
        sa.Column('estimated_calories', sa.Float(), nullable=True),
        sa.Column('estimated_active_min', sa.Float(), nullable=True),
        sa.Column('estimated_rest_min', sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['workout_cycle_id'], ['workout_cycles.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_workouts_cycle_index', 'workouts', ['workout_cycle_id', 'index'])
    op.create_index(
        'ix_workouts_cycle_pending', 'workouts', ['workout_cycle_id'],
        postgresql_where=sa.text('completed = false'),
    )
    op.create_index(
        'ix_workouts_cycle_skipped', 'workouts', ['workout_cycle_id'],
        postgresql_where=sa.text('skipped = true'),
    )

    op.create_table(
        'individual_exercises',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('is_bodyweight', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_time_based', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('muscle_group_id', sa.Integer(), nullable=True),
        sa.Column('exercise_id', sa.Integer(), nullable=True),
        sa.Column('last_completed_workout_exercise_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['muscle_group_id'], ['muscle_groups.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['exercise_id'], ['exercises.id'], ondelete='SET NULL'),
    )
    op.create_index(
        'ux_individual_exercises_user_name_muscle_group', 'individual_exercises',
        ['user_id', 'name', 'muscle_group_id'], unique=True,
    )
    op.create_index('ix_individual_exercises_user_exercise', 'individual_exercises', ['user_id', 'exercise_id'])

    op.create_table(
        'workout_exercises',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('workout_id', sa.Integer(), nullable=False),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('individual_exercise_id', sa.Integer(), nullable=False),
        sa.Column('previous_exercise_id', sa.Integer(), nullable=True),
        sa.Column('completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('skipped', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['individual_exercise_id'], ['individual_exercises.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_workout_exercises_workout_index', 'workout_exercises', ['workout_id', 'index'])
    op.create_index(
        'ix_workout_exercises_workout_pending', 'workout_exercises', ['workout_id'],
        postgresql_where=sa.text('completed = false'),
    )
    op.create_index(
        'ix_workout_exercises_workout_skipped', 'workout_exercises', ['workout_id'],
        postgresql_where=sa.text('skipped = true'),
    )
    op.create_index(
        'ix_workout_exercises_individual_exercise_id', 'workout_exercises', ['individual_exercise_id'],
    )
    op.create_foreign_key(
        'fk_individual_exercises_last_completed_we_id', 'individual_exercises', 'workout_exercises',
        ['last_completed_workout_exercise_id'], ['id'], ondelete='SET NULL',
    )

    op.create_table(
        'workout_sets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('workout_exercise_id', sa.Integer(), nullable=False),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('reps', sa.Integer(), nullable=True),
        sa.Column('previous_weight', sa.Float(), nullable=True),
        sa.Column('previous_reps', sa.Integer(), nullable=True),
        sa.Column('completed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('skipped', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['workout_exercise_id'], ['workout_exercises.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_workout_sets_exercise_index', 'workout_sets', ['workout_exercise_id', 'index'])
    op.create_index(
        'ix_workout_sets_exercise_pending', 'workout_sets', ['workout_exercise_id'],
        postgresql_where=sa.text('completed = false'),
    )
    op.create_index(
        'ix_workout_sets_exercise_skipped', 'workout_sets', ['workout_exercise_id'],
        postgresql_where=sa.text('skipped = true'),
    )
    # Performance-history reads only touch logged sets
    op.create_index(
        'ix_workout_sets_exercise_performance', 'workout_sets', ['workout_exercise_id'],
        postgresql_where=sa.text('reps IS NOT NULL AND weight IS NOT NULL'),
    )

    # Energy estimator inputs
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False, unique=True),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('sex', sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Idempotency log for async handlers
    op.create_table(
        'handler_logs',
        sa.Column('handler_name', sa.Text(), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('entity_key', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('handler_name', 'event_type', 'entity_key', name='pk_handler_logs'),
    )
    op.create_index('ix_handler_logs_created_at', 'handler_logs', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_handler_logs_created_at', table_name='handler_logs')
    op.drop_table('handler_logs')
    op.drop_table('user_profiles')

    op.drop_constraint('fk_individual_exercises_last_completed_we_id', 'individual_exercises', type_='foreignkey')
    op.drop_constraint('fk_workout_plans_current_cycle_id', 'workout_plans', type_='foreignkey')

    op.drop_table('workout_sets')
    op.drop_table('workout_exercises')
    op.drop_table('individual_exercises')
    op.drop_table('workouts')
    op.drop_table('workout_cycles')
    op.drop_table('workout_plans')
    op.drop_table('exercises')
    op.drop_table('muscle_groups')
