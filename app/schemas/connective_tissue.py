"""
Connective-tissue state schemas.

Stress is on a 0-100 scale.  Risk is classified against the structure's
own injury threshold rather than a global cut-off.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from app.catalog.connective_tissue import Joint, StructureId, StructureType


class TissueRiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class StressOccurrence(BaseModel):
    """Stress one observation put on one structure."""

    timestamp: datetime.datetime
    exercise_name: str
    stress: float = Field(..., ge=0.0, le=100.0)
    remaining_stress: float = Field(..., ge=0.0, le=100.0)


class ConnectiveTissueState(BaseModel):
    """Current stress on one tendon, ligament, cartilage or bursa."""

    structure: StructureId
    structure_type: StructureType
    joint: Joint
    half_life_hours: float
    cumulative: bool
    injury_threshold: float
    stress: float = Field(..., ge=0.0, le=100.0)
    risk_level: TissueRiskLevel = TissueRiskLevel.LOW
    is_at_risk: bool = False
    occurrences: list[StressOccurrence] = Field(default_factory=list)
    last_stressed_at: Optional[datetime.datetime] = None
    recovered_at: Optional[datetime.datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def recovery(self) -> float:
        return 100.0 - self.stress


class ConnectiveTissueRecommendations(BaseModel):
    """Aggregated action flags across all tracked structures."""

    at_risk: list[StructureId] = Field(default_factory=list)
    critical: list[StructureId] = Field(default_factory=list)
    should_rest: bool = False
    should_deload: bool = False
    recommendations: list[str] = Field(
        default_factory=list,
        description="Machine-readable recommendation ids",
    )
