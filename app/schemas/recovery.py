"""
Muscle and exercise recovery schemas.

Fatigue is on a 0-100 scale (0 = fully recovered) and recovery is its
complement.  Recovery is always *derived* from fatigue (or vice versa for
exercises) so the two can never drift apart:

    recovery + fatigue == 100
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from app.catalog.muscles import MuscleId, TrainingWindow


class Confidence(str, Enum):
    """How much the state can be trusted."""
    HIGH = "high"
    LOW = "low"


class FatigueEvent(BaseModel):
    """One time-stamped fatigue stimulus on a single entity."""

    timestamp: datetime.datetime
    exercise_name: str
    initial_fatigue: float = Field(..., ge=0.0, le=100.0)
    rpe: Optional[float] = None


# ---------------------------------------------------------------------------
# Muscles
# ---------------------------------------------------------------------------

class MuscleState(BaseModel):
    """Current fatigue state of one muscle."""

    muscle: MuscleId
    half_life_hours: float = Field(..., gt=0.0)
    direct_fatigue: float = Field(
        ..., ge=0.0, le=100.0,
        description="Fatigue from exercises that trained this muscle",
    )
    spillover_fatigue: float = Field(
        0.0, ge=0.0, le=100.0,
        description="Extra fatigue received from related muscles",
    )
    fatigue: float = Field(..., ge=0.0, le=100.0)
    events: list[FatigueEvent] = Field(default_factory=list)
    last_trained_at: Optional[datetime.datetime] = None
    recovered_at: Optional[datetime.datetime] = Field(
        None,
        description="Projected time at which fatigue falls below the 5% floor",
    )
    training_window: Optional[TrainingWindow] = None

    @computed_field  # type: ignore[misc]
    @property
    def recovery(self) -> float:
        return 100.0 - self.fatigue


class MuscleImbalanceSeverity(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class MuscleImbalance(BaseModel):
    """Fatigue ratio between two opposing muscle groups above threshold."""

    numerator: MuscleId
    denominator: MuscleId
    ratio: float
    threshold: float
    severity: MuscleImbalanceSeverity
    risk: str


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------

class MuscleContribution(BaseModel):
    """Per-muscle breakdown entry of an exercise's recovery."""

    muscle: MuscleId
    involvement: float
    recovery: float
    weighted_fatigue: float = Field(
        ...,
        description="(100 - recovery) × involvement weight",
    )


class ExerciseState(BaseModel):
    """Current recovery state of one exercise (movement pattern)."""

    exercise_name: str
    movement_recovery: float = Field(..., ge=0.0, le=100.0)
    cns_recovery: float = Field(..., ge=0.0, le=100.0)
    muscle_recovery: float = Field(..., ge=0.0, le=100.0)
    recovery: float = Field(..., ge=0.0, le=100.0)
    last_performed_at: Optional[datetime.datetime] = None
    last_rpe: Optional[float] = None
    recovered_at: Optional[datetime.datetime] = None
    recommended_rest_days: int = 2
    breakdown: list[MuscleContribution] = Field(default_factory=list)
    confidence: Confidence = Confidence.HIGH
    is_fallback: bool = Field(
        False,
        description="Exercise not in the reference table; muscle average used",
    )

    @computed_field  # type: ignore[misc]
    @property
    def fatigue(self) -> float:
        return 100.0 - self.recovery


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class TrainingRecommendations(BaseModel):
    """Muscle-level training signals derived from the recovery state."""

    trainable_muscles: list[MuscleId] = Field(default_factory=list)
    avoid_muscles: list[MuscleId] = Field(default_factory=list)
    should_rest: bool = False
    should_deload: bool = False


class RecoveryState(BaseModel):
    """Muscle and exercise recovery at one point in time."""

    computed_at: datetime.datetime
    muscles: dict[MuscleId, MuscleState] = Field(default_factory=dict)
    exercises: dict[str, ExerciseState] = Field(default_factory=dict)
    imbalances: list[MuscleImbalance] = Field(default_factory=list)
    global_fatigue: float = Field(0.0, ge=0.0, le=100.0)
    recommendations: TrainingRecommendations = Field(default_factory=TrainingRecommendations)

    @computed_field  # type: ignore[misc]
    @property
    def overall_recovery(self) -> float:
        return 100.0 - self.global_fatigue
