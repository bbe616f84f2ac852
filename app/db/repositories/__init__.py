"""Database repositories."""

from app.db.repositories.context import (
    DailyContextRepository,
    DemographicsRepository,
    MenstrualCycleRepository,
)
from app.db.repositories.observation import TrainingObservationRepository
from app.db.repositories.recovery import RecoveryParameterRepository, RecoverySnapshotRepository

__all__ = [
    "DailyContextRepository",
    "DemographicsRepository",
    "MenstrualCycleRepository",
    "RecoveryParameterRepository",
    "RecoverySnapshotRepository",
    "TrainingObservationRepository",
]
