"""
Recovery assessment schema.

:class:`RecoveryAssessment` is the single output of the engine: every
per-entity state plus the aggregates derived from them, tagged with a
data-quality tier and a confidence scalar.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.catalog.connective_tissue import StructureId
from app.catalog.muscles import MuscleId
from app.schemas.connective_tissue import ConnectiveTissueState
from app.schemas.context import ContextModifiers
from app.schemas.energy import EnergySubstrateState
from app.schemas.injury_risk import InjuryRiskAssessment
from app.schemas.recovery import ExerciseState, MuscleImbalance, MuscleState, TrainingRecommendations
from app.schemas.workload import ACWRResult


class DataQuality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecoveryAssessment(BaseModel):
    """Complete recovery and injury-risk picture for one user."""

    user_id: Optional[int] = None
    computed_at: datetime.datetime
    muscles: dict[MuscleId, MuscleState] = Field(default_factory=dict)
    exercises: dict[str, ExerciseState] = Field(default_factory=dict)
    connective_tissue: dict[StructureId, ConnectiveTissueState] = Field(default_factory=dict)
    energy: dict[MuscleId, EnergySubstrateState] = Field(default_factory=dict)
    context: ContextModifiers = Field(default_factory=ContextModifiers)
    imbalances: list[MuscleImbalance] = Field(default_factory=list)
    global_fatigue: float = Field(0.0, ge=0.0, le=100.0)
    overall_recovery: float = Field(100.0, ge=0.0, le=100.0)
    recommendations: TrainingRecommendations = Field(default_factory=TrainingRecommendations)
    acwr: float = Field(1.0, ge=0.0, description="Acute:chronic workload ratio")
    workload: Optional[ACWRResult] = None
    injury_risk: InjuryRiskAssessment
    data_quality: DataQuality = DataQuality.LOW
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    warnings: list[str] = Field(default_factory=list)
    is_fallback: bool = Field(
        False,
        description="Neutral or cached result served because the live computation failed",
    )
