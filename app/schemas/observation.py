"""
Training observation schemas.

A training observation is one completed exercise entry: ``sets × reps``
at a given load and effort (RPE).  Observations are the only raw input
to every decay model and are immutable once recorded.

Validation happens here, at the ingestion boundary.  Decay code further
down never re-checks ranges.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# Effective-volume multipliers by RPE floor (hard sets count fully).
_EFFECTIVE_VOLUME_STEPS: list[tuple[float, float]] = [
    (9.0, 1.0),
    (7.0, 0.7),
    (6.0, 0.4),
]
_WARMUP_MULTIPLIER = 0.1


def as_naive_utc(value: datetime.datetime) -> datetime.datetime:
    """Naive UTC, the form every stored timestamp uses; naive input is taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def effective_volume_multiplier(rpe: float) -> float:
    """Share of volume that counts toward fatigue at a given RPE."""
    for floor, multiplier in _EFFECTIVE_VOLUME_STEPS:
        if rpe >= floor:
            return multiplier
    return _WARMUP_MULTIPLIER


# ---------------------------------------------------------------------------
# Entity schemas (Base / Create / Response)
# ---------------------------------------------------------------------------

class TrainingObservationBase(BaseModel):
    """Fields shared by every observation schema."""

    timestamp: datetime.datetime = Field(
        ...,
        description="When the exercise was completed (UTC)",
    )
    exercise_name: str = Field(
        ..., min_length=1, max_length=100,
        description="Exercise identifier as logged",
    )
    sets: int = Field(..., gt=0, le=100)
    reps: int = Field(..., gt=0, le=1000)
    weight: float = Field(
        ..., ge=0.0,
        description="Load per rep (kg); 0 for bodyweight",
    )
    rpe: float = Field(
        ..., ge=6.0, le=10.0,
        description="Rate of perceived exertion (6-10 continuous scale)",
    )
    set_duration_seconds: float = Field(
        45.0, gt=0.0, le=600.0,
        description="Average time under tension per set",
    )
    rest_interval_seconds: float = Field(
        120.0, ge=0.0, le=3600.0,
        description="Rest between sets",
    )
    is_eccentric: bool = Field(
        False,
        description="Sets emphasised the eccentric (lowering) phase",
    )
    is_ballistic: bool = Field(
        False,
        description="Sets were performed explosively",
    )

    @field_validator("exercise_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("exercise_name must not be blank")
        return stripped

    @field_validator("timestamp")
    @classmethod
    def _to_naive_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return as_naive_utc(value)


class TrainingObservation(TrainingObservationBase):
    """Immutable observation consumed by the recovery engine."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @computed_field  # type: ignore[misc]
    @property
    def volume(self) -> float:
        return self.sets * self.reps * self.weight

    @computed_field  # type: ignore[misc]
    @property
    def effective_volume(self) -> float:
        return self.volume * effective_volume_multiplier(self.rpe)


class TrainingObservationCreate(TrainingObservationBase):
    """Schema for recording a training observation."""
    pass


class TrainingObservationResponse(TrainingObservation):
    """Schema for observation data in API responses."""

    id: int
    user_id: int
    initial_fatigue: Optional[float] = None
    created_at: datetime.datetime
