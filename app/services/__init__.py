"""Business logic services."""

from app.services.calibration_service import CalibrationService
from app.services.context_service import ContextService
from app.services.observation_service import ObservationService
from app.services.recovery_service import RecoveryDataSource, RecoveryService, SqlRecoveryDataSource

__all__ = [
    "CalibrationService",
    "ContextService",
    "ObservationService",
    "RecoveryDataSource",
    "RecoveryService",
    "SqlRecoveryDataSource",
]
