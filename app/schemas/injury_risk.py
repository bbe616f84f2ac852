"""
Injury-risk schemas.

The aggregator scores five factors 0-100, weights each at 0.2 and then
amplifies the weighted sum by the user's recovery capacity.  All
recommendation fields are machine-readable ids; wording is left to the
presentation layer.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.catalog.connective_tissue import Joint, StructureId


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"
    CRITICAL = "critical"


class RiskFactorCategory(str, Enum):
    ACWR = "acwr"
    CONNECTIVE_TISSUE = "connective_tissue"
    MUSCLE_IMBALANCE = "muscle_imbalance"
    ENERGY_DEPLETION = "energy_depletion"
    SYSTEMIC_FATIGUE = "systemic_fatigue"


class RiskFactor(BaseModel):
    """One weighted contributor to the overall injury-risk score."""

    factor: str = Field(..., description="Machine-readable factor id")
    category: RiskFactorCategory
    level: RiskLevel
    score: float = Field(..., ge=0.0, le=100.0, description="Raw factor score")
    weight: float = Field(..., ge=0.0, le=1.0)
    contribution: float = Field(..., ge=0.0, description="score × weight")
    recommendation: str = Field(..., description="Machine-readable recommendation id")
    rationale: str = Field(..., description="Short technical note on the inputs that drove the score")


class JointRisk(BaseModel):
    """Connective-tissue stress grouped by joint."""

    joint: Joint
    score: float = Field(..., ge=0.0, le=100.0, description="Mean stress across the joint's tracked structures")
    level: RiskLevel
    at_risk_structures: list[StructureId] = Field(default_factory=list)


class InjuryRiskAssessment(BaseModel):
    """Aggregated injury risk at one point in time."""

    score: float = Field(..., ge=0.0, le=100.0)
    level: RiskLevel
    factors: list[RiskFactor] = Field(default_factory=list)
    joint_risks: list[JointRisk] = Field(default_factory=list)
    should_rest: bool = False
    should_deload: bool = False
    safe_to_resume_at: Optional[datetime.datetime] = None
    capacity_modifier: float = Field(1.0, description="Overall recovery capacity from context")
    amplification: float = Field(1.0, description="Multiplier applied to the weighted factor sum")
