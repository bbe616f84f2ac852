"""
Workload ratio (ACWR) schemas.

The acute:chronic workload ratio compares the last 7 days of training
volume with the weekly average of the last 28 days.  Zone labels are
*operational categories*:

- ``detraining`` — ACWR < 0.8
- ``optimal``    — 0.8 <= ACWR < 1.3
- ``caution``    — 1.3 <= ACWR < 1.5
- ``danger``     — ACWR >= 1.5
"""

from enum import Enum

from pydantic import BaseModel, Field


class WorkloadZone(str, Enum):
    DETRAINING = "detraining"
    OPTIMAL = "optimal"
    CAUTION = "caution"
    DANGER = "danger"


class ACWRResult(BaseModel):
    """Acute and chronic load with their ratio."""

    acute_load: float = Field(..., ge=0.0, description="Volume over the acute window")
    chronic_load: float = Field(..., ge=0.0, description="Weekly average volume over the chronic window")
    ratio: float = Field(..., ge=0.0, description="acute / chronic (0.0 when chronic is zero)")
    zone: WorkloadZone
    has_history: bool = Field(..., description="Whether the chronic window contains any load")
