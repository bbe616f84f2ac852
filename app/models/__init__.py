from app.models.context import DailyContext, MenstrualCycle, UserDemographics
from app.models.observation import TrainingObservationRecord
from app.models.recovery import RecoverySnapshot, UserRecoveryParameter

__all__ = [
    "DailyContext",
    "MenstrualCycle",
    "RecoverySnapshot",
    "TrainingObservationRecord",
    "UserDemographics",
    "UserRecoveryParameter",
]
