"""
Bayesian calibration schemas.

Each recovery parameter (for now, a muscle or exercise half-life) has a
population prior and a per-user posterior.  Parameter names follow the
``"{entity}_halfLife"`` convention, e.g. ``"Chest_halfLife"``.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ConfidenceLevel(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


# Ordinal score used for averaging (1 = very_low … 5 = very_high).
CONFIDENCE_SCORES: dict[ConfidenceLevel, int] = {
    ConfidenceLevel.VERY_LOW: 1,
    ConfidenceLevel.LOW: 2,
    ConfidenceLevel.MEDIUM: 3,
    ConfidenceLevel.HIGH: 4,
    ConfidenceLevel.VERY_HIGH: 5,
}


class CalibrationState(str, Enum):
    """Lifecycle of a per-user parameter."""
    UNINITIALIZED = "uninitialized"
    POPULATION_ONLY = "population_only"
    CALIBRATING = "calibrating"
    CALIBRATED = "calibrated"


class RecoveryParameter(BaseModel):
    """Population prior plus user posterior for one parameter."""

    parameter_name: str = Field(..., description="e.g. 'Chest_halfLife'")
    population_mean: float = Field(..., gt=0.0)
    population_std: float = Field(..., gt=0.0)
    user_mean: float = Field(..., gt=0.0)
    user_std: float = Field(..., gt=0.0)
    observation_count: int = Field(0, ge=0)
    confidence: ConfidenceLevel = ConfidenceLevel.VERY_LOW
    state: CalibrationState = CalibrationState.POPULATION_ONLY
    last_updated: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True

    @property
    def entity(self) -> str:
        return self.parameter_name.rsplit("_", 1)[0]


# ---------------------------------------------------------------------------
# Observations
# ---------------------------------------------------------------------------

class HalfLifeObservation(BaseModel):
    """A directly observed half-life for one entity."""

    entity: str = Field(..., min_length=1, description="Muscle or exercise name")
    observed_half_life: float = Field(..., gt=0.0, le=2000.0)
    confidence: float = Field(
        ..., gt=0.0, le=1.0,
        description="Trust in this observation (scales the data variance)",
    )
    observed_at: Optional[datetime.datetime] = None


class SubjectiveRecoveryRating(BaseModel):
    """User-reported recovery some hours after training an entity."""

    entity: str = Field(..., min_length=1)
    hours_since_training: float = Field(..., gt=0.0, le=2000.0)
    recovery_rating: float = Field(
        ..., ge=0.0, le=100.0,
        description="Self-rated recovery percentage",
    )
    observed_at: Optional[datetime.datetime] = None


class PerformanceRecoveryObservation(BaseModel):
    """Performance-based recovery evidence (volume achieved vs baseline)."""

    entity: str = Field(..., min_length=1)
    hours_since_training: float = Field(..., gt=0.0, le=2000.0)
    volume_ratio: float = Field(
        ..., ge=0.0, le=3.0,
        description="Volume achieved / baseline volume for the same entity",
    )
    observed_at: Optional[datetime.datetime] = None


class CalibrationBatch(BaseModel):
    """Any mix of closed-loop observations for one user."""

    half_lives: list[HalfLifeObservation] = Field(default_factory=list)
    subjective: list[SubjectiveRecoveryRating] = Field(default_factory=list)
    performance: list[PerformanceRecoveryObservation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _not_empty(self) -> "CalibrationBatch":
        if not (self.half_lives or self.subjective or self.performance):
            raise ValueError("calibration batch contains no observations")
        return self


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class CalibrationUpdate(BaseModel):
    """Outcome of incorporating one observation."""

    parameter_name: str
    observed_value: float
    prior_mean: float
    posterior_mean: float
    posterior_std: float
    observation_count: int
    confidence: ConfidenceLevel
    z_score: float
    anomalous: bool = Field(
        False,
        description="More than the z-threshold from the population mean",
    )
    incorporated: bool = True


class CalibrationSummary(BaseModel):
    """Overview of a user's calibration progress."""

    total_parameters: int = 0
    calibrated_parameters: int = 0
    total_observations: int = 0
    average_confidence_score: float = Field(0.0, ge=0.0, le=5.0)
    population_weight: float = Field(
        1.0, ge=0.0, le=1.0,
        description="Mean weight the population prior still carries across calibrated parameters",
    )
    most_confident: list[RecoveryParameter] = Field(default_factory=list)
    least_confident: list[RecoveryParameter] = Field(default_factory=list)


class CalibrationBatchResult(BaseModel):
    """Response to a calibration batch: one update per observation plus the new summary."""

    updates: list[CalibrationUpdate] = Field(default_factory=list)
    summary: CalibrationSummary
