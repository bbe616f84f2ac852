"""
Workload ratio — scalar ACWR over the raw observation list.

The acute:chronic workload ratio compares the last ``acute_days`` of
training volume with the weekly average of the last ``chronic_days``:

    acute   = Σ volume in (now - 7d, now]
    chronic = Σ volume in (now - 28d, now] / 4
    ACWR    = acute / chronic          (0.0 when chronic is zero)

It is a **monitoring** signal: the injury-risk aggregator turns it into
one of its five weighted factors.  Zone labels are operational
categories, not absolute truths.
"""

from __future__ import annotations

import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from app.schemas.observation import TrainingObservation
from app.schemas.workload import ACWRResult, WorkloadZone

# Neutral ratio used when the workload cannot be computed.
NEUTRAL_ACWR = 1.0

# ======================================================================
# Configuration
# ======================================================================


class ACWRConfig(BaseModel):
    """Configuration for the ACWR computation."""

    acute_days: int = Field(7, ge=3, le=14)
    chronic_days: int = Field(28, ge=14, le=56)

    @property
    def chronic_weeks(self) -> float:
        return self.chronic_days / 7.0


DEFAULT_ACWR_CONFIG = ACWRConfig()

# ======================================================================
# Zone labelling
# ======================================================================

_THRESHOLDS: list[tuple[WorkloadZone, float, float]] = [
    (WorkloadZone.DETRAINING, 0.0, 0.8),
    (WorkloadZone.OPTIMAL, 0.8, 1.3),
    (WorkloadZone.CAUTION, 1.3, 1.5),
    (WorkloadZone.DANGER, 1.5, float("inf")),
]


def _label_acwr(value: float) -> WorkloadZone:
    """Map an ACWR float to its zone."""
    for label, low, high in _THRESHOLDS:
        if low <= value < high:
            return label
    return WorkloadZone.DANGER


# ======================================================================
# Main entry point
# ======================================================================


def _window_volume(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    days: int,
) -> float:
    start = now - datetime.timedelta(days=days)
    return sum(o.volume for o in observations if start < o.timestamp <= now)


def compute_acwr(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    config: Optional[ACWRConfig] = None,
) -> ACWRResult:
    """Compute the acute:chronic workload ratio at *now*.

    Args:
        observations: Training history.
        now: Reference time.
        config: Optional :class:`ACWRConfig` override (uses
            ``DEFAULT_ACWR_CONFIG`` if ``None``).

    Returns:
        :class:`ACWRResult`; ``ratio`` is 0.0 when the chronic window is empty.
    """
    config = config or DEFAULT_ACWR_CONFIG

    acute = _window_volume(observations, now, config.acute_days)
    chronic = _window_volume(observations, now, config.chronic_days) / config.chronic_weeks

    ratio = round(acute / chronic, 3) if chronic > 0 else 0.0
    return ACWRResult(
        acute_load=round(acute, 4),
        chronic_load=round(chronic, 4),
        ratio=ratio,
        zone=_label_acwr(ratio),
        has_history=chronic > 0,
    )
