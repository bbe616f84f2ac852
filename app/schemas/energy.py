"""
Energy-substrate schemas.

Three stores per muscle, each 0-100 (100 = fully loaded):

    pcr       phosphocreatine: fuels the first ~10s of maximal effort
    glycogen  muscle glycogen: fuels 10-120s efforts (hypertrophy sets)
    imtg      intramuscular triglycerides: low-intensity fuel
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.catalog.muscles import MuscleId


class SessionEnergyDepletion(BaseModel):
    """Energy cost of one workout for one muscle."""

    pcr_depletion: float = Field(..., ge=0.0, le=100.0)
    glycogen_depletion: float = Field(..., ge=0.0, le=100.0)
    imtg_depletion: float = Field(..., ge=0.0, le=100.0)
    final_pcr: float = Field(
        ..., ge=0.0, le=100.0,
        description="PCr at session end, including intra-session recovery",
    )


class EnergySubstrateState(BaseModel):
    """Current energy store levels for one muscle."""

    muscle: MuscleId
    pcr: float = Field(100.0, ge=0.0, le=100.0)
    glycogen: float = Field(100.0, ge=0.0, le=100.0)
    imtg: float = Field(100.0, ge=0.0, le=100.0)
    last_workout_at: Optional[datetime.datetime] = None
    replenished_at: Optional[datetime.datetime] = Field(
        None,
        description="Projected full glycogen replenishment",
    )


class EnergyRecommendations(BaseModel):
    """Readiness flags for one muscle's energy stores."""

    muscle: MuscleId
    can_train_heavy: bool
    can_train_volume: bool
    warnings: list[str] = Field(
        default_factory=list,
        description="Machine-readable warning ids",
    )
