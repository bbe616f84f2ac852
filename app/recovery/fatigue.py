"""
Muscle & exercise fatigue builder.

Turns a list of training observations into per-muscle and per-exercise
recovery states at a reference time ``now``.

Model
-----
Each observation deposits an *initial fatigue* on every muscle the
exercise involves:

    base    = volume / reference_volume × rpe_mult × complexity × mass_mult
    rpe_mult = 0.3 + (rpe - 6) / 4 × 1.2          (RPE 6 → 0.3, RPE 10 → 1.5)
    initial = clamp(base × 100, 0, 100) × involvement%

``complexity`` depends on the exercise tier (axial lifts are more
fatiguing than isolation work) and ``mass_mult`` on the muscle size
(small muscles saturate faster).  Events then decay with the muscle's
half-life and superpose (see :mod:`app.recovery.decay`).

Exercise recovery blends three clocks:

    movement  recovery of the motor pattern itself (exercise half-life)
    cns       central fatigue, half-life × (1 + cns_load / 10)
    muscle    involvement-weighted mean of the muscles' recovery

with tier-dependent weights: CNS dominates axial lifts, muscles dominate
isolation work.

Unknown exercises never abort the computation: they contribute nothing
to muscle fatigue and their exercise state falls back to the plain
average of muscle recoveries, flagged ``confidence="low"``.
"""

from __future__ import annotations

import datetime
import math
from typing import Iterable, Mapping, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from app.catalog.exercises import ExerciseProfile, ExerciseTier, get_exercise
from app.catalog.muscles import (
    MASS_WEIGHTS,
    MuscleId,
    MuscleMass,
    get_muscle,
    muscle_half_life,
    optimal_training_window,
)
from app.catalog.spillover import IMBALANCE_CHECKS, SPILLOVER_EDGES
from app.recovery.decay import (
    RECOVERED_FLOOR,
    hours_between,
    hours_until_below,
    projected_recovery,
    recovery_fraction,
    superpose,
)
from app.recovery.spillover import apply_spillover, detect_imbalances
from app.schemas.observation import TrainingObservation
from app.schemas.recovery import (
    Confidence,
    ExerciseState,
    FatigueEvent,
    MuscleContribution,
    MuscleState,
    RecoveryState,
    TrainingRecommendations,
)

# ======================================================================
# Configuration
# ======================================================================

_DEFAULT_TIER_COMPLEXITY: dict[int, float] = {
    ExerciseTier.AXIAL: 1.5,
    ExerciseTier.COMPOUND: 1.0,
    ExerciseTier.ISOLATION: 0.7,
}

_DEFAULT_MASS_MULTIPLIER: dict[MuscleMass, float] = {
    MuscleMass.LARGE: 0.8,
    MuscleMass.MEDIUM: 1.0,
    MuscleMass.SMALL: 1.2,
}

# (cns, movement, muscle) blend weights per tier.
_DEFAULT_TIER_BLEND: dict[int, tuple[float, float, float]] = {
    ExerciseTier.AXIAL: (0.5, 0.3, 0.2),
    ExerciseTier.COMPOUND: (0.2, 0.4, 0.4),
    ExerciseTier.ISOLATION: (0.1, 0.2, 0.7),
}

_DEFAULT_REST_DAYS = 2


class FatigueConfig(BaseModel):
    """Tunables for the fatigue builder."""

    reference_volume: float = Field(10000.0, gt=0.0, description="Volume (kg) that maps to base fatigue 1.0")
    tier_complexity: dict[int, float] = Field(default_factory=lambda: dict(_DEFAULT_TIER_COMPLEXITY))
    unknown_complexity: float = 1.0
    mass_multiplier: dict[MuscleMass, float] = Field(default_factory=lambda: dict(_DEFAULT_MASS_MULTIPLIER))
    tier_blend: dict[int, tuple[float, float, float]] = Field(
        default_factory=lambda: dict(_DEFAULT_TIER_BLEND),
    )
    primary_weight: float = Field(1.5, description="Extra weight of primary movers in exercise muscle recovery")
    recovered_floor: float = RECOVERED_FLOOR

    trainable_threshold: float = 80.0
    avoid_threshold: float = 50.0
    rest_threshold: float = 40.0
    deload_recovery_threshold: float = 60.0
    deload_fatigue_threshold: float = 50.0

    apply_spillover: bool = True


DEFAULT_FATIGUE_CONFIG = FatigueConfig()


# ======================================================================
# Initial fatigue
# ======================================================================


def rpe_multiplier(rpe: float) -> float:
    """Effort scaling: RPE 6 → 0.3, RPE 10 → 1.5."""
    return 0.3 + (rpe - 6.0) / 4.0 * 1.2


def compute_initial_fatigue(
    observation: TrainingObservation,
    exercise: Optional[ExerciseProfile],
    muscle: MuscleId,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> float:
    """Fatigue (0-100) one observation puts on *muscle* before involvement scaling."""
    if exercise is None:
        complexity = config.unknown_complexity
    else:
        complexity = config.tier_complexity.get(int(exercise.tier), config.unknown_complexity)

    profile = get_muscle(muscle)
    mass_mult = config.mass_multiplier.get(profile.mass, 1.0) if profile else 1.0

    base = observation.volume / config.reference_volume * rpe_multiplier(observation.rpe) * complexity * mass_mult
    return min(100.0, max(0.0, base * 100.0))


def build_muscle_events(
    observations: Iterable[TrainingObservation],
    now: datetime.datetime,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> dict[MuscleId, list[FatigueEvent]]:
    """Fatigue events per muscle, scaled by involvement, in chronological order.

    Observations after *now* and unknown exercises are skipped.
    """
    events: dict[MuscleId, list[FatigueEvent]] = {}
    unknown: set[str] = set()

    for obs in sorted(observations, key=lambda o: o.timestamp):
        if obs.timestamp > now:
            continue
        exercise = get_exercise(obs.exercise_name, exercises)
        if exercise is None:
            unknown.add(obs.exercise_name)
            continue
        for inv in exercise.involvement:
            initial = compute_initial_fatigue(obs, exercise, inv.muscle, config) * inv.percentage / 100.0
            events.setdefault(inv.muscle, []).append(FatigueEvent(
                timestamp=obs.timestamp,
                exercise_name=exercise.name,
                initial_fatigue=initial,
                rpe=obs.rpe,
            ))

    for name in sorted(unknown):
        logger.warning(f"[RECOVERY] Unknown exercise '{name}' ignored for muscle fatigue")

    return {m: events[m] for m in MuscleId if m in events}


# ======================================================================
# Muscle states
# ======================================================================


def _compute_muscle_state(
    muscle: MuscleId,
    events: list[FatigueEvent],
    half_life: float,
    now: datetime.datetime,
    floor: float,
) -> MuscleState:
    fatigue = superpose(events, half_life, now)
    return MuscleState(
        muscle=muscle,
        half_life_hours=half_life,
        direct_fatigue=fatigue,
        fatigue=fatigue,
        events=events,
        last_trained_at=events[-1].timestamp if events else None,
        recovered_at=projected_recovery(fatigue, half_life, now, floor),
        training_window=optimal_training_window(muscle),
    )


def compute_muscle_states(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    *,
    half_lives: Optional[Mapping[str, float]] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> dict[MuscleId, MuscleState]:
    """Current fatigue of every muscle touched directly or via spillover.

    Args:
        observations: Training history.
        now: Reference time.
        half_lives: Calibrated half-lives keyed by entity name; falls back
            to the muscle table.
        exercises: Optional alternative exercise catalog.
        config: Builder tunables.

    Returns:
        States keyed by muscle, in :class:`MuscleId` order.
    """
    overrides = half_lives or {}
    events = build_muscle_events(observations, now, exercises, config)

    direct = {
        muscle: _compute_muscle_state(
            muscle,
            muscle_events,
            overrides.get(muscle.value, muscle_half_life(muscle)),
            now,
            config.recovered_floor,
        )
        for muscle, muscle_events in events.items()
    }
    if not config.apply_spillover:
        return direct
    return apply_spillover(direct, now, SPILLOVER_EDGES, overrides, config.recovered_floor)


# ======================================================================
# Exercise states
# ======================================================================


def recommended_rest_days(
    exercise_name: str,
    last_rpe: float = 8.0,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
) -> int:
    """Rest days before repeating an exercise: ceil(hl/24 × (0.7 + (rpe-6)/4 × 0.6))."""
    exercise = get_exercise(exercise_name, exercises)
    if exercise is None:
        return _DEFAULT_REST_DAYS
    return math.ceil(exercise.half_life_hours / 24.0 * (0.7 + (last_rpe - 6.0) / 4.0 * 0.6))


def _fallback_exercise_state(
    exercise_name: str,
    muscle_recovery: Mapping[MuscleId, float],
    last_performed: Optional[datetime.datetime],
    last_rpe: Optional[float],
) -> ExerciseState:
    average = sum(muscle_recovery.values()) / len(muscle_recovery) if muscle_recovery else 100.0
    return ExerciseState(
        exercise_name=exercise_name,
        movement_recovery=100.0,
        cns_recovery=100.0,
        muscle_recovery=average,
        recovery=average,
        last_performed_at=last_performed,
        last_rpe=last_rpe,
        recommended_rest_days=_DEFAULT_REST_DAYS,
        confidence=Confidence.LOW,
        is_fallback=True,
    )


def compute_exercise_state(
    exercise_name: str,
    muscle_recovery: Mapping[MuscleId, float],
    now: datetime.datetime,
    last_performed: Optional[datetime.datetime] = None,
    last_rpe: Optional[float] = None,
    *,
    half_life: Optional[float] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> ExerciseState:
    """Blend movement, CNS and muscle recovery for one exercise.

    Args:
        exercise_name: Exercise as logged.
        muscle_recovery: Current recovery (0-100) per muscle; missing
            muscles count as fully recovered.
        now: Reference time.
        last_performed: When the exercise was last done.  ``None`` means
            movement and CNS are fully recovered.
        last_rpe: RPE of the last performance (drives rest days).
        half_life: Calibrated movement half-life override.
        exercises: Optional alternative exercise catalog.
        config: Builder tunables.
    """
    exercise = get_exercise(exercise_name, exercises)
    if exercise is None:
        return _fallback_exercise_state(exercise_name, muscle_recovery, last_performed, last_rpe)

    hl = half_life or exercise.half_life_hours
    cns_hl = hl * (1.0 + exercise.cns_load / 10.0)

    if last_performed is None:
        movement = cns = 100.0
        recovered_at = None
    else:
        elapsed = hours_between(last_performed, now)
        movement = recovery_fraction(hl, elapsed) * 100.0
        cns = recovery_fraction(cns_hl, elapsed) * 100.0
        # The CNS clock is always the slower one.
        eta_hours = hours_until_below(100.0, cns_hl, config.recovered_floor)
        recovered_at = last_performed + datetime.timedelta(hours=eta_hours)
        if recovered_at <= now:
            recovered_at = None

    breakdown: list[MuscleContribution] = []
    weighted_sum = 0.0
    total_weight = 0.0
    for inv in exercise.involvement:
        rec = muscle_recovery.get(inv.muscle, 100.0)
        weight = inv.percentage * (config.primary_weight if inv.primary else 1.0)
        weighted_sum += rec * weight
        total_weight += weight
        breakdown.append(MuscleContribution(
            muscle=inv.muscle,
            involvement=inv.percentage,
            recovery=rec,
            weighted_fatigue=(100.0 - rec) * weight,
        ))
    muscle = weighted_sum / total_weight if total_weight > 0 else 100.0
    breakdown.sort(key=lambda c: c.weighted_fatigue, reverse=True)

    w_cns, w_move, w_muscle = config.tier_blend[int(exercise.tier)]
    total = cns * w_cns + movement * w_move + muscle * w_muscle

    return ExerciseState(
        exercise_name=exercise.name,
        movement_recovery=movement,
        cns_recovery=cns,
        muscle_recovery=muscle,
        recovery=min(100.0, max(0.0, total)),
        last_performed_at=last_performed,
        last_rpe=last_rpe,
        recovered_at=recovered_at,
        recommended_rest_days=recommended_rest_days(
            exercise.name, last_rpe if last_rpe is not None else 8.0, exercises,
        ),
        breakdown=breakdown,
    )


def compute_exercise_states(
    observations: Sequence[TrainingObservation],
    muscles: Mapping[MuscleId, MuscleState],
    now: datetime.datetime,
    *,
    half_lives: Optional[Mapping[str, float]] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> dict[str, ExerciseState]:
    """State of every exercise present in the history, keyed by canonical name."""
    overrides = half_lives or {}
    muscle_recovery = {m: s.recovery for m, s in muscles.items()}

    last_seen: dict[str, TrainingObservation] = {}
    for obs in sorted(observations, key=lambda o: o.timestamp):
        if obs.timestamp > now:
            continue
        exercise = get_exercise(obs.exercise_name, exercises)
        key = exercise.name if exercise else obs.exercise_name
        last_seen[key] = obs

    states: dict[str, ExerciseState] = {}
    for name, obs in last_seen.items():
        states[name] = compute_exercise_state(
            name,
            muscle_recovery,
            now,
            obs.timestamp,
            obs.rpe,
            half_life=overrides.get(name),
            exercises=exercises,
            config=config,
        )
    return states


# ======================================================================
# Aggregates
# ======================================================================


def compute_global_fatigue(muscles: Mapping[MuscleId, MuscleState]) -> float:
    """Mass-weighted mean fatigue over the muscles that carry a state."""
    weighted = 0.0
    total_weight = 0.0
    for muscle in (m for m in MuscleId if m in muscles):
        profile = get_muscle(muscle)
        weight = MASS_WEIGHTS[profile.mass] if profile else 1.0
        weighted += muscles[muscle].fatigue * weight
        total_weight += weight
    return weighted / total_weight if total_weight > 0 else 0.0


def compute_training_recommendations(
    muscles: Mapping[MuscleId, MuscleState],
    global_fatigue: float,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> TrainingRecommendations:
    overall = 100.0 - global_fatigue
    trainable: list[MuscleId] = []
    avoid: list[MuscleId] = []
    for muscle in MuscleId:
        state = muscles.get(muscle)
        recovery = state.recovery if state else 100.0
        if recovery >= config.trainable_threshold:
            trainable.append(muscle)
        elif recovery < config.avoid_threshold:
            avoid.append(muscle)
    return TrainingRecommendations(
        trainable_muscles=trainable,
        avoid_muscles=avoid,
        should_rest=overall < config.rest_threshold,
        should_deload=(
            overall < config.deload_recovery_threshold
            and global_fatigue > config.deload_fatigue_threshold
        ),
    )


def build_recovery_state(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    *,
    half_lives: Optional[Mapping[str, float]] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: FatigueConfig = DEFAULT_FATIGUE_CONFIG,
) -> RecoveryState:
    """Muscle + exercise recovery, imbalances and training signals at *now*."""
    muscles = compute_muscle_states(
        observations, now, half_lives=half_lives, exercises=exercises, config=config,
    )
    exercise_states = compute_exercise_states(
        observations, muscles, now, half_lives=half_lives, exercises=exercises, config=config,
    )
    global_fatigue = compute_global_fatigue(muscles)
    imbalances = detect_imbalances({m: s.fatigue for m, s in muscles.items()}, IMBALANCE_CHECKS)

    return RecoveryState(
        computed_at=now,
        muscles=muscles,
        exercises=exercise_states,
        imbalances=imbalances,
        global_fatigue=global_fatigue,
        recommendations=compute_training_recommendations(muscles, global_fatigue, config),
    )
