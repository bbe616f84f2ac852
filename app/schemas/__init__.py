"""Pydantic schemas for request/response validation and engine results."""

from app.schemas.observation import (
    TrainingObservation,
    TrainingObservationCreate,
    TrainingObservationResponse,
)
from app.schemas.recovery import (
    ExerciseState,
    FatigueEvent,
    MuscleImbalance,
    MuscleState,
    RecoveryState,
    TrainingRecommendations,
)
from app.schemas.connective_tissue import ConnectiveTissueRecommendations, ConnectiveTissueState
from app.schemas.energy import EnergyRecommendations, EnergySubstrateState
from app.schemas.context import (
    ContextBundle,
    ContextModifiers,
    DailyContextResponse,
    DailyContextUpsert,
    Demographics,
    MenstrualCycleRecord,
)
from app.schemas.calibration import (
    CalibrationBatch,
    CalibrationBatchResult,
    CalibrationSummary,
    CalibrationUpdate,
    RecoveryParameter,
)
from app.schemas.workload import ACWRResult, WorkloadZone
from app.schemas.injury_risk import InjuryRiskAssessment, RiskFactor, RiskLevel
from app.schemas.assessment import DataQuality, RecoveryAssessment

__all__ = [
    "TrainingObservation",
    "TrainingObservationCreate",
    "TrainingObservationResponse",
    "ExerciseState",
    "FatigueEvent",
    "MuscleImbalance",
    "MuscleState",
    "RecoveryState",
    "TrainingRecommendations",
    "ConnectiveTissueRecommendations",
    "ConnectiveTissueState",
    "EnergyRecommendations",
    "EnergySubstrateState",
    "ContextBundle",
    "ContextModifiers",
    "DailyContextResponse",
    "DailyContextUpsert",
    "Demographics",
    "MenstrualCycleRecord",
    "CalibrationBatch",
    "CalibrationBatchResult",
    "CalibrationSummary",
    "CalibrationUpdate",
    "RecoveryParameter",
    "ACWRResult",
    "WorkloadZone",
    "InjuryRiskAssessment",
    "RiskFactor",
    "RiskLevel",
    "DataQuality",
    "RecoveryAssessment",
]
