"""Create recovery tables

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create observation, context, calibration and snapshot tables."""
    op.create_table('training_observations', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('exercise_name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('sets', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('rpe', sa.Float(), nullable=False),
        sa.Column('set_duration_seconds', sa.Float(), nullable=False),
        sa.Column('rest_interval_seconds', sa.Float(), nullable=False),
        sa.Column('is_eccentric', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_ballistic', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('initial_fatigue', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_training_observations_user_id'), 'training_observations', ['user_id'])
    op.create_index(op.f('ix_training_observations_timestamp'), 'training_observations', ['timestamp'])
    op.create_index(op.f('ix_training_observations_exercise_name'), 'training_observations', ['exercise_name'])

    op.create_table('daily_context', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('sleep_hours', sa.Float(), nullable=True),
        sa.Column('sleep_quality', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('sleep_interruptions', sa.Integer(), nullable=True),
        sa.Column('protein_g_per_kg', sa.Float(), nullable=True),
        sa.Column('carbs_g_per_kg', sa.Float(), nullable=True),
        sa.Column('calorie_balance', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('hydration', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('meal_timing', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('perceived_stress', sa.Float(), nullable=True),
        sa.Column('work_stress', sa.Float(), nullable=True),
        sa.Column('life_stress', sa.Float(), nullable=True),
        sa.Column('resting_heart_rate', sa.Integer(), nullable=True),
        sa.Column('hrv_ms', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_daily_context_user_date'))
    op.create_index(op.f('ix_daily_context_user_id'), 'daily_context', ['user_id'])
    op.create_index(op.f('ix_daily_context_date'), 'daily_context', ['date'])

    op.create_table('user_demographics', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('sex', sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column('training_age_years', sa.Float(), nullable=False),
        sa.Column('experience', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('active_injuries', sa.JSON(), nullable=False),
        sa.Column('chronic_conditions', sa.JSON(), nullable=False),
        sa.Column('body_weight_kg', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_user_demographics_user_id'), 'user_demographics', ['user_id'], unique=True)

    op.create_table('menstrual_cycles', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('phase', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('day_in_cycle', sa.Integer(), nullable=True),
        sa.Column('symptoms', sa.JSON(), nullable=False),
        sa.Column('hormonal_contraception', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_menstrual_cycle_user_date'))
    op.create_index(op.f('ix_menstrual_cycles_user_id'), 'menstrual_cycles', ['user_id'])
    op.create_index(op.f('ix_menstrual_cycles_date'), 'menstrual_cycles', ['date'])

    op.create_table('user_recovery_parameters', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('parameter_name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('population_mean', sa.Float(), nullable=False),
        sa.Column('population_std', sa.Float(), nullable=False),
        sa.Column('user_mean', sa.Float(), nullable=False),
        sa.Column('user_std', sa.Float(), nullable=False),
        sa.Column('observation_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('confidence', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('state', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'parameter_name', name='uq_recovery_parameter_user_name'))
    op.create_index(op.f('ix_user_recovery_parameters_user_id'), 'user_recovery_parameters', ['user_id'])

    op.create_table('recovery_snapshots', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('computed_at', sa.DateTime(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_recovery_snapshots_user_id'), 'recovery_snapshots', ['user_id'])
    op.create_index(op.f('ix_recovery_snapshots_computed_at'), 'recovery_snapshots', ['computed_at'])


def downgrade() -> None:
    """Drop recovery tables."""
    for table in ('recovery_snapshots', 'user_recovery_parameters', 'menstrual_cycles',
                  'user_demographics', 'daily_context', 'training_observations'):
        op.drop_table(table)
