"""
Connective-tissue tracker — tendon, ligament, cartilage and bursa stress.

Each observation of an exercise with a stress profile loads the listed
structures:

    stress = base
             × eccentric_mult   (if the set was eccentric-emphasised)
             × ballistic_mult   (if the set was ballistic)
             × (1 + (sets - 1) × 0.15)
             × (0.5 + (rpe - 6) / 4 × 0.8)
    capped at 100

Occurrences decay with the structure's half-life (days to weeks).  How
they combine depends on the structure:

* cumulative (overuse) tissue sums every decayed occurrence;
* non-cumulative (acute) tissue keeps only the largest decayed value.

Risk is classified against the structure's own injury threshold.
"""

from __future__ import annotations

import datetime
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from app.catalog.connective_tissue import (
    EXERCISE_STRESS,
    STRUCTURE_CATALOG,
    ConnectiveStructure,
    StructureId,
    StructureStress,
)
from app.catalog.exercises import ExerciseProfile, get_exercise
from app.recovery.decay import MAX_FATIGUE, RECOVERED_FLOOR, decay, hours_between, projected_recovery
from app.schemas.connective_tissue import (
    ConnectiveTissueRecommendations,
    ConnectiveTissueState,
    StressOccurrence,
    TissueRiskLevel,
)
from app.schemas.observation import TrainingObservation

# ======================================================================
# Configuration
# ======================================================================


class ConnectiveTissueConfig(BaseModel):
    """Tunables for the connective-tissue tracker."""

    volume_step: float = Field(0.15, ge=0.0, description="Extra stress per set beyond the first")
    intensity_base: float = 0.5
    intensity_range: float = Field(0.8, description="Added at RPE 10 on top of intensity_base")
    critical_ratio: float = Field(1.3, description="stress >= threshold × ratio → critical")
    moderate_ratio: float = Field(0.7, description="stress >= threshold × ratio → moderate")
    recovered_floor: float = RECOVERED_FLOOR


DEFAULT_CONNECTIVE_TISSUE_CONFIG = ConnectiveTissueConfig()

_EXERCISE_STRESS_BY_LOWER: dict[str, str] = {name.lower(): name for name in EXERCISE_STRESS}


# ======================================================================
# Stress per occurrence
# ======================================================================


def compute_occurrence_stress(
    profile: StructureStress,
    observation: TrainingObservation,
    config: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG,
) -> float:
    """Stress (0-100) one observation puts on one structure."""
    stress = profile.base_stress
    if observation.is_eccentric:
        stress *= profile.eccentric_multiplier
    if observation.is_ballistic:
        stress *= profile.ballistic_multiplier
    stress *= 1.0 + (observation.sets - 1) * config.volume_step
    stress *= config.intensity_base + (observation.rpe - 6.0) / 4.0 * config.intensity_range
    return min(MAX_FATIGUE, max(0.0, stress))


def stress_profile_for(
    exercise_name: str,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
) -> tuple[StructureStress, ...]:
    """Structures loaded by an exercise (empty when it has no profile)."""
    exercise = get_exercise(exercise_name, exercises)
    name = exercise.name if exercise else exercise_name
    profile = EXERCISE_STRESS.get(name)
    if profile is not None:
        return profile
    canonical = _EXERCISE_STRESS_BY_LOWER.get(name.strip().lower())
    return EXERCISE_STRESS[canonical] if canonical else ()


def compute_exercise_structure_stress(
    observation: TrainingObservation,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG,
) -> dict[StructureId, float]:
    """Stress per structure for a single observation."""
    return {
        p.structure: compute_occurrence_stress(p, observation, config)
        for p in stress_profile_for(observation.exercise_name, exercises)
    }


# ======================================================================
# Per-structure state
# ======================================================================


def classify_risk(
    stress: float,
    threshold: float,
    config: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG,
) -> TissueRiskLevel:
    if stress >= threshold * config.critical_ratio:
        return TissueRiskLevel.CRITICAL
    if stress >= threshold:
        return TissueRiskLevel.HIGH
    if stress >= threshold * config.moderate_ratio:
        return TissueRiskLevel.MODERATE
    return TissueRiskLevel.LOW


def _combine_stress(structure: ConnectiveStructure, remaining: list[float]) -> float:
    if not remaining:
        return 0.0
    if structure.cumulative:
        return min(MAX_FATIGUE, sum(remaining))
    return min(MAX_FATIGUE, max(remaining))


def compute_structure_state(
    structure: ConnectiveStructure,
    occurrences: Sequence[tuple[datetime.datetime, str, float]],
    now: datetime.datetime,
    config: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG,
) -> ConnectiveTissueState:
    """Current stress on one structure.

    Args:
        structure: Reference data for the structure.
        occurrences: ``(timestamp, exercise_name, stress)`` tuples.
        now: Reference time.
        config: Tracker tunables.
    """
    decayed: list[StressOccurrence] = []
    for timestamp, exercise_name, stress in sorted(occurrences, key=lambda o: o[0]):
        remaining = decay(stress, structure.half_life_hours, hours_between(timestamp, now))
        decayed.append(StressOccurrence(
            timestamp=timestamp,
            exercise_name=exercise_name,
            stress=stress,
            remaining_stress=min(MAX_FATIGUE, remaining),
        ))

    total = _combine_stress(structure, [o.remaining_stress for o in decayed])
    return ConnectiveTissueState(
        structure=structure.structure,
        structure_type=structure.structure_type,
        joint=structure.joint,
        half_life_hours=structure.half_life_hours,
        cumulative=structure.cumulative,
        injury_threshold=structure.injury_threshold,
        stress=total,
        risk_level=classify_risk(total, structure.injury_threshold, config),
        is_at_risk=total >= structure.injury_threshold,
        occurrences=decayed,
        last_stressed_at=decayed[-1].timestamp if decayed else None,
        recovered_at=projected_recovery(total, structure.half_life_hours, now, config.recovered_floor),
    )


def compute_connective_tissue_states(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    *,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: ConnectiveTissueConfig = DEFAULT_CONNECTIVE_TISSUE_CONFIG,
    min_stress: Optional[float] = None,
) -> dict[StructureId, ConnectiveTissueState]:
    """State of every structure loaded by the history.

    Args:
        observations: Training history; entries after *now* are ignored.
        now: Reference time.
        exercises: Optional alternative exercise catalog.
        config: Tracker tunables.
        min_stress: Drop structures whose current stress is below this
            value.  ``None`` keeps every loaded structure.

    Returns:
        States keyed by structure, in :class:`StructureId` order.
    """
    per_structure: dict[StructureId, list[tuple[datetime.datetime, str, float]]] = {}
    for obs in observations:
        if obs.timestamp > now:
            continue
        for structure, stress in compute_exercise_structure_stress(obs, exercises, config).items():
            per_structure.setdefault(structure, []).append((obs.timestamp, obs.exercise_name, stress))

    states: dict[StructureId, ConnectiveTissueState] = {}
    for structure_id in StructureId:
        occurrences = per_structure.get(structure_id)
        if not occurrences:
            continue
        state = compute_structure_state(STRUCTURE_CATALOG[structure_id], occurrences, now, config)
        if min_stress is not None and state.stress < min_stress:
            continue
        states[structure_id] = state
    return states


# ======================================================================
# Recommendations
# ======================================================================


def connective_tissue_recommendations(
    states: Mapping[StructureId, ConnectiveTissueState],
) -> ConnectiveTissueRecommendations:
    """Rest on any critical structure, deload on any high or moderate one."""
    at_risk = [s for s, st in states.items() if st.is_at_risk]
    critical = [s for s, st in states.items() if st.risk_level == TissueRiskLevel.CRITICAL]
    elevated = [
        s for s, st in states.items()
        if st.risk_level in (TissueRiskLevel.HIGH, TissueRiskLevel.MODERATE)
    ]

    recommendations: list[str] = []
    if critical:
        recommendations.append("rest_critical_structures")
    if elevated:
        recommendations.append("reduce_load_on_stressed_structures")
    if at_risk:
        recommendations.append("avoid_eccentric_and_ballistic_work")

    return ConnectiveTissueRecommendations(
        at_risk=at_risk,
        critical=critical,
        should_rest=bool(critical),
        should_deload=bool(elevated),
        recommendations=recommendations,
    )
