"""
Recovery assessment — orchestrates every model into one result.

Architecture (three layers):
    1. **State builders** (independent, may run concurrently)
       - muscle & exercise fatigue (+ spillover)
       - connective-tissue stress
       - energy substrates
    2. **Modifiers** — workload ratio and contextual recovery capacity
    3. **Aggregator** — injury risk from all of the above

The engine is a pure function of its inputs: no I/O, no caching, no
module-level per-user state.  Per-user calibration results and tunables
are passed in explicitly through :class:`AssessmentContext`.
"""

from __future__ import annotations

import datetime
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from app.catalog.exercises import ExerciseProfile, get_exercise
from app.recovery.connective_tissue import (
    DEFAULT_CONNECTIVE_TISSUE_CONFIG,
    ConnectiveTissueConfig,
    compute_connective_tissue_states,
)
from app.recovery.context import compute_context_modifiers, nutrition_quality
from app.recovery.energy import DEFAULT_ENERGY_CONFIG, EnergyConfig, build_energy_states
from app.recovery.fatigue import DEFAULT_FATIGUE_CONFIG, FatigueConfig, build_recovery_state
from app.recovery.injury_risk import DEFAULT_INJURY_RISK_CONFIG, InjuryRiskConfig, compute_injury_risk
from app.recovery.workload import DEFAULT_ACWR_CONFIG, NEUTRAL_ACWR, ACWRConfig, compute_acwr
from app.schemas.assessment import DataQuality, RecoveryAssessment
from app.schemas.context import ContextBundle
from app.schemas.injury_risk import InjuryRiskAssessment, RiskLevel
from app.schemas.observation import TrainingObservation

# (quality, confidence)
_QUALITY_CONFIDENCE: dict[DataQuality, float] = {
    DataQuality.HIGH: 0.9,
    DataQuality.MEDIUM: 0.7,
    DataQuality.LOW: 0.5,
}

_HIGH_QUALITY_SLEEP_RECORDS = 5
_MEDIUM_QUALITY_SLEEP_RECORDS = 3

NEUTRAL_RECOVERY = 50.0


class AssessmentContext(BaseModel):
    """Per-call inputs other than the raw data: calibration and tunables."""

    half_lives: dict[str, float] = Field(
        default_factory=dict,
        description="Calibrated half-lives keyed by muscle or exercise name",
    )
    exercises: Optional[dict[str, ExerciseProfile]] = Field(
        None,
        description="Alternative exercise catalog (defaults to the built-in one)",
    )
    tracked_stress_floor: Optional[float] = Field(
        20.0,
        description="Connective structures below this stress are left out; None keeps all",
    )
    fatigue: FatigueConfig = DEFAULT_FATIGUE_CONFIG
    connective_tissue: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG
    energy: EnergyConfig = DEFAULT_ENERGY_CONFIG
    acwr: ACWRConfig = DEFAULT_ACWR_CONFIG
    injury_risk: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG


DEFAULT_ASSESSMENT_CONTEXT = AssessmentContext()


# ======================================================================
# Data quality
# ======================================================================


def assess_data_quality(bundle: Optional[ContextBundle]) -> tuple[DataQuality, float]:
    """``(quality, confidence)`` from how much context the user supplied."""
    if bundle is None:
        return DataQuality.LOW, _QUALITY_CONFIDENCE[DataQuality.LOW]

    sleep_count = len(bundle.sleep)
    if sleep_count >= _HIGH_QUALITY_SLEEP_RECORDS and bundle.nutrition and bundle.demographics:
        quality = DataQuality.HIGH
    elif sleep_count >= _MEDIUM_QUALITY_SLEEP_RECORDS or bundle.nutrition:
        quality = DataQuality.MEDIUM
    else:
        quality = DataQuality.LOW
    return quality, _QUALITY_CONFIDENCE[quality]


# ======================================================================
# Main entry point
# ======================================================================


def compute_recovery_assessment(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    context_bundle: Optional[ContextBundle] = None,
    assessment_context: Optional[AssessmentContext] = None,
    *,
    user_id: Optional[int] = None,
    parallel: bool = False,
) -> RecoveryAssessment:
    """Compute the complete recovery and injury-risk assessment.

    Args:
        observations: Training history (typically the lookback window).
        now: Reference time; observations after it are ignored.
        context_bundle: Optional sleep/nutrition/stress/demographics/cycle data.
        assessment_context: Calibrated half-lives and tunables.
        user_id: Echoed in the result.
        parallel: Run the three state builders on a thread pool.  Results
            are identical either way.

    Returns:
        :class:`RecoveryAssessment`.
    """
    ctx = assessment_context or DEFAULT_ASSESSMENT_CONTEXT
    quality = nutrition_quality(context_bundle.nutrition) if context_bundle else None

    def _recovery():
        return build_recovery_state(
            observations, now, half_lives=ctx.half_lives, exercises=ctx.exercises, config=ctx.fatigue,
        )

    def _connective():
        return compute_connective_tissue_states(
            observations, now, exercises=ctx.exercises, config=ctx.connective_tissue,
            min_stress=ctx.tracked_stress_floor,
        )

    def _energy():
        return build_energy_states(
            observations, now, nutrition_quality=quality, exercises=ctx.exercises, config=ctx.energy,
        )

    if parallel:
        with ThreadPoolExecutor(max_workers=3) as pool:
            recovery_future = pool.submit(_recovery)
            connective_future = pool.submit(_connective)
            energy_future = pool.submit(_energy)
            recovery = recovery_future.result()
            connective = connective_future.result()
            energy = energy_future.result()
    else:
        recovery = _recovery()
        connective = _connective()
        energy = _energy()

    warnings: list[str] = []
    unknown = sorted({
        o.exercise_name for o in observations
        if o.timestamp <= now and get_exercise(o.exercise_name, ctx.exercises) is None
    })
    warnings.extend(f"unknown_exercise:{name}" for name in unknown)

    workload = compute_acwr(observations, now, ctx.acwr)
    acwr = workload.ratio if workload.has_history else NEUTRAL_ACWR

    modifiers = compute_context_modifiers(context_bundle)
    injury_risk = compute_injury_risk(
        acwr,
        connective,
        recovery.imbalances,
        energy,
        recovery.global_fatigue,
        modifiers.overall,
        now,
        ctx.injury_risk,
    )

    data_quality, confidence = assess_data_quality(context_bundle)

    logger.debug(
        f"[RECOVERY] Assessment computed user_id={user_id} observations={len(observations)} "
        f"risk={injury_risk.level.value} quality={data_quality.value}"
    )

    return RecoveryAssessment(
        user_id=user_id,
        computed_at=now,
        muscles=recovery.muscles,
        exercises=recovery.exercises,
        connective_tissue=connective,
        energy=energy,
        context=modifiers,
        imbalances=recovery.imbalances,
        global_fatigue=recovery.global_fatigue,
        overall_recovery=recovery.overall_recovery,
        recommendations=recovery.recommendations,
        acwr=acwr,
        workload=workload,
        injury_risk=injury_risk,
        data_quality=data_quality,
        confidence=confidence,
        warnings=warnings,
    )


def neutral_assessment(
    user_id: Optional[int],
    now: datetime.datetime,
    warning: str,
) -> RecoveryAssessment:
    """Safe default served when no live or cached assessment is available."""
    return RecoveryAssessment(
        user_id=user_id,
        computed_at=now,
        global_fatigue=100.0 - NEUTRAL_RECOVERY,
        overall_recovery=NEUTRAL_RECOVERY,
        acwr=NEUTRAL_ACWR,
        injury_risk=InjuryRiskAssessment(
            score=0.0,
            level=RiskLevel.LOW,
            safe_to_resume_at=now,
        ),
        data_quality=DataQuality.LOW,
        confidence=_QUALITY_CONFIDENCE[DataQuality.LOW],
        warnings=[warning],
        is_fallback=True,
    )
