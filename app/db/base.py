"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from app.models.context import DailyContext, MenstrualCycle, UserDemographics  # noqa: F401
from app.models.observation import TrainingObservationRecord  # noqa: F401
from app.models.recovery import RecoverySnapshot, UserRecoveryParameter  # noqa: F401
