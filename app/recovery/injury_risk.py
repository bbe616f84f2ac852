"""
Injury-risk aggregator — five weighted factors, amplified by context.

Factors (each scored 0-100, weight 0.2):

    acwr               training-load spike (or detraining) from the ACWR
    connective_tissue  mean stress of at-risk structures, +15 % per extra one
    muscle_imbalance   60 / 35 / 15 per high / moderate / low imbalance
    energy_depletion   mean glycogen shortfall below 50 %, × 0.8, max 40
    systemic_fatigue   global fatigue when above 60

The weighted sum is multiplied by an amplification factor derived from
the user's overall recovery capacity (poor sleep, stress … raise risk;
an excellent context lowers it), then capped at 100.

Levels: >= 81 critical, >= 61 very_high, >= 41 high, >= 21 moderate,
else low.
"""

from __future__ import annotations

import datetime
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from app.catalog.connective_tissue import Joint, StructureId
from app.catalog.muscles import MuscleId
from app.schemas.connective_tissue import ConnectiveTissueState
from app.schemas.energy import EnergySubstrateState
from app.schemas.injury_risk import (
    InjuryRiskAssessment,
    JointRisk,
    RiskFactor,
    RiskFactorCategory,
    RiskLevel,
)
from app.schemas.recovery import MuscleImbalance, MuscleImbalanceSeverity

# ======================================================================
# Configuration
# ======================================================================

# (min_score, level) checked top-down.
_RISK_LEVELS: list[tuple[float, RiskLevel]] = [
    (81.0, RiskLevel.CRITICAL),
    (61.0, RiskLevel.VERY_HIGH),
    (41.0, RiskLevel.HIGH),
    (21.0, RiskLevel.MODERATE),
]

# (min_acwr, score, level) checked top-down; below the last row → detraining.
_ACWR_RISK: list[tuple[float, float, RiskLevel]] = [
    (2.0, 90.0, RiskLevel.CRITICAL),
    (1.5, 70.0, RiskLevel.VERY_HIGH),
    (1.3, 45.0, RiskLevel.HIGH),
    (1.1, 20.0, RiskLevel.MODERATE),
    (0.8, 0.0, RiskLevel.LOW),
]
_DETRAINING_RISK = (25.0, RiskLevel.MODERATE)

_DEFAULT_IMBALANCE_SCORES: dict[MuscleImbalanceSeverity, float] = {
    MuscleImbalanceSeverity.HIGH: 60.0,
    MuscleImbalanceSeverity.MODERATE: 35.0,
    MuscleImbalanceSeverity.LOW: 15.0,
}

# (capacity_below, amplification) checked top-down.
_AMPLIFICATION: list[tuple[float, float]] = [
    (0.6, 1.8),
    (0.75, 1.5),
    (0.9, 1.2),
]
_ENHANCED_CAPACITY = (1.1, 0.85)

_DEFAULT_WEIGHTS: dict[RiskFactorCategory, float] = {c: 0.2 for c in RiskFactorCategory}


class InjuryRiskConfig(BaseModel):
    """Tunables for the injury-risk aggregator."""

    weights: dict[RiskFactorCategory, float] = Field(default_factory=lambda: dict(_DEFAULT_WEIGHTS))
    structure_count_step: float = 0.15
    imbalance_scores: dict[MuscleImbalanceSeverity, float] = Field(
        default_factory=lambda: dict(_DEFAULT_IMBALANCE_SCORES),
    )
    glycogen_risk_threshold: float = 50.0
    energy_factor: float = 0.8
    energy_cap: float = 40.0
    systemic_threshold: float = 60.0
    joint_threshold: float = Field(40.0, description="Joints above this mean stress are reported")
    critical_rest_days: int = 14
    very_high_rest_days: int = 7


DEFAULT_INJURY_RISK_CONFIG = InjuryRiskConfig()


def get_risk_level(score: float) -> RiskLevel:
    """Map a 0-100 score to its risk level."""
    for min_score, level in _RISK_LEVELS:
        if score >= min_score:
            return level
    return RiskLevel.LOW


# ======================================================================
# Factor scores
# ======================================================================


def acwr_risk(acwr: float) -> tuple[float, RiskLevel]:
    """``(score, level)`` for a workload ratio."""
    for min_acwr, score, level in _ACWR_RISK:
        if acwr >= min_acwr:
            return score, level
    return _DETRAINING_RISK


def connective_tissue_risk(
    states: Mapping[StructureId, ConnectiveTissueState],
    config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG,
) -> tuple[float, list[StructureId]]:
    """``(score, at_risk_structures)``."""
    at_risk = [s for s in states.values() if s.is_at_risk]
    if not at_risk:
        return 0.0, []
    mean_stress = sum(s.stress for s in at_risk) / len(at_risk)
    multiplier = 1.0 + (len(at_risk) - 1) * config.structure_count_step
    return min(100.0, mean_stress * multiplier), [s.structure for s in at_risk]


def imbalance_risk(
    imbalances: Sequence[MuscleImbalance],
    config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG,
) -> float:
    return min(100.0, sum(config.imbalance_scores[i.severity] for i in imbalances))


def energy_depletion_risk(
    states: Mapping[MuscleId, EnergySubstrateState],
    config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG,
) -> tuple[float, list[MuscleId]]:
    """``(score, depleted_muscles)`` from glycogen shortfalls below 50 %."""
    depleted = [s for s in states.values() if s.glycogen < config.glycogen_risk_threshold]
    if not depleted:
        return 0.0, []
    mean_shortfall = sum(config.glycogen_risk_threshold - s.glycogen for s in depleted) / len(depleted)
    return min(config.energy_cap, mean_shortfall * config.energy_factor), [s.muscle for s in depleted]


def systemic_fatigue_risk(global_fatigue: float, config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG) -> float:
    return global_fatigue if global_fatigue > config.systemic_threshold else 0.0


def risk_amplification(capacity: float) -> float:
    """Multiplier applied to the weighted factor sum for a recovery capacity."""
    for below, amplification in _AMPLIFICATION:
        if capacity < below:
            return amplification
    min_capacity, amplification = _ENHANCED_CAPACITY
    if capacity >= min_capacity:
        return amplification
    return 1.0


# ======================================================================
# Factor assembly
# ======================================================================


def _factor(
    category: RiskFactorCategory,
    score: float,
    recommendation: str,
    rationale: str,
    config: InjuryRiskConfig,
    level: Optional[RiskLevel] = None,
) -> RiskFactor:
    weight = config.weights.get(category, 0.2)
    return RiskFactor(
        factor=category.value,
        category=category,
        level=level or get_risk_level(score),
        score=score,
        weight=weight,
        contribution=score * weight,
        recommendation=recommendation,
        rationale=rationale,
    )


def compute_risk_factors(
    acwr: float,
    connective_tissue: Mapping[StructureId, ConnectiveTissueState],
    imbalances: Sequence[MuscleImbalance],
    energy: Mapping[MuscleId, EnergySubstrateState],
    global_fatigue: float,
    config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG,
) -> list[RiskFactor]:
    """Every factor with a non-zero score, sorted by contribution (highest first)."""
    factors: list[RiskFactor] = []

    score, level = acwr_risk(acwr)
    if score > 0:
        recommendation = "deload_immediately" if level == RiskLevel.CRITICAL else "reduce_weekly_volume"
        if acwr < 0.8:
            recommendation = "increase_training_consistency"
        factors.append(_factor(
            RiskFactorCategory.ACWR, score, recommendation, f"acwr={acwr:.2f}", config, level,
        ))

    score, structures = connective_tissue_risk(connective_tissue, config)
    if score > 0:
        factors.append(_factor(
            RiskFactorCategory.CONNECTIVE_TISSUE, score, "reduce_load_on_stressed_structures",
            "at_risk=" + ",".join(s.value for s in structures), config,
        ))

    score = imbalance_risk(imbalances, config)
    if score > 0:
        factors.append(_factor(
            RiskFactorCategory.MUSCLE_IMBALANCE, score, "correct_muscle_imbalances",
            "imbalances=" + ",".join(f"{i.numerator.value}/{i.denominator.value}:{i.severity.value}"
                                     for i in imbalances),
            config,
        ))

    score, muscles = energy_depletion_risk(energy, config)
    if score > 0:
        factors.append(_factor(
            RiskFactorCategory.ENERGY_DEPLETION, score, "replenish_glycogen",
            "glycogen_depleted=" + ",".join(m.value for m in muscles), config,
        ))

    score = systemic_fatigue_risk(global_fatigue, config)
    if score > 0:
        factors.append(_factor(
            RiskFactorCategory.SYSTEMIC_FATIGUE, score, "full_rest_day",
            f"global_fatigue={global_fatigue:.1f}", config,
        ))

    factors.sort(key=lambda f: f.contribution, reverse=True)
    return factors


def compute_joint_risks(
    connective_tissue: Mapping[StructureId, ConnectiveTissueState],
    config: InjuryRiskConfig = DEFAULT_INJURY_RISK_CONFIG,
) -> list[JointRisk]:
    """Per-joint mean stress; joints kept when above 40 or hosting an at-risk structure."""
    by_joint: dict[Joint, list[ConnectiveTissueState]] = {}
    for state in connective_tissue.values():
        by_joint.setdefault(state.joint, []).append(state)

    risks: list[JointRisk] = []
    for joint in Joint:
        states = by_joint.get(joint)
        if not states:
            continue
        mean_stress = sum(s.stress for s in states) / len(states)
        at_risk = [s.structure for s in states if s.is_at_risk]
        if mean_stress > config.joint_threshold or at_risk:
            risks.append(JointRisk(
                joint=joint,
                score=mean_stress,
                level=get_risk_level(mean_stress),
                at_risk_structures=at_risk,
            ))
    return risks


# ======================================================================
# Main entry point
# ======================================================================


def compute_injury_risk(
    acwr: float,
    connective_tissue: Mapping[StructureId, ConnectiveTissueState],
    imbalances: Sequence[MuscleImbalance],
    energy: Mapping[MuscleId, EnergySubstrateState],
    global_fatigue: float,
    recovery_capacity: float,
    now: datetime.datetime,
    config: Optional[InjuryRiskConfig] = None,
) -> InjuryRiskAssessment:
    """Aggregate injury risk at *now*.

    Args:
        acwr: Acute:chronic workload ratio.
        connective_tissue: Current structure states.
        imbalances: Detected muscle imbalances.
        energy: Current energy stores per muscle.
        global_fatigue: Mass-weighted global muscle fatigue (0-100).
        recovery_capacity: Overall context modifier (0.4-1.4).
        now: Reference time for the safe-to-resume estimate.
        config: Optional :class:`InjuryRiskConfig` override.

    Returns:
        :class:`InjuryRiskAssessment`.
    """
    config = config or DEFAULT_INJURY_RISK_CONFIG

    factors = compute_risk_factors(acwr, connective_tissue, imbalances, energy, global_fatigue, config)
    amplification = risk_amplification(recovery_capacity)
    score = min(100.0, sum(f.contribution for f in factors) * amplification)
    level = get_risk_level(score)

    should_rest = level in (RiskLevel.CRITICAL, RiskLevel.VERY_HIGH)
    should_deload = level in (RiskLevel.HIGH, RiskLevel.MODERATE)

    if level == RiskLevel.CRITICAL:
        safe_at = now + datetime.timedelta(days=config.critical_rest_days)
    elif level == RiskLevel.VERY_HIGH:
        safe_at = now + datetime.timedelta(days=config.very_high_rest_days)
    else:
        safe_at = now

    return InjuryRiskAssessment(
        score=score,
        level=level,
        factors=factors,
        joint_risks=compute_joint_risks(connective_tissue, config),
        should_rest=should_rest,
        should_deload=should_deload,
        safe_to_resume_at=safe_at,
        capacity_modifier=recovery_capacity,
        amplification=amplification,
    )
