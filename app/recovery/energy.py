"""
Energy-substrate tracker — PCr, glycogen and IMTG per muscle.

Three stores on very different clocks:

    PCr       seconds-to-minutes (180 s half-life); gates heavy, low-rep work
    glycogen  hours-to-days (three-phase resynthesis); gates volume work
    IMTG      ~18 h linear refill; minor in strength training

A *workout* is a run of observations with no gap longer than
``session_gap_hours``.  Within a workout PCr is depleted set by set and
partially restored during each rest interval (but not after the last
set).  Glycogen and IMTG depletions are summed per exercise, scaled by
the muscle's involvement.

Across the history each workout's depletion is applied at its start,
then the stores recover until the next workout (or ``now``).
"""

from __future__ import annotations

import datetime
import math
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from app.catalog.exercises import ExerciseProfile, get_exercise
from app.catalog.muscles import MuscleId
from app.recovery.decay import hours_between
from app.schemas.energy import EnergyRecommendations, EnergySubstrateState, SessionEnergyDepletion
from app.schemas.observation import TrainingObservation

FULL = 100.0

# ======================================================================
# Configuration
# ======================================================================


class EnergyConfig(BaseModel):
    """Tunables for the energy-substrate tracker."""

    pcr_base_depletion: float = 40.0
    pcr_half_life_seconds: float = 180.0
    glycogen_base_depletion: float = 3.5
    imtg_depletion_per_minute: float = 1.5
    imtg_refill_hours: float = 18.0
    glycogen_replenish_hours: float = Field(36.0, description="Hours to refill a 100 % deficit")
    replenished_threshold: float = 95.0
    default_nutrition_quality: float = Field(0.8, ge=0.0, le=1.0)
    session_gap_hours: float = Field(3.0, gt=0.0, description="Longer gaps start a new workout")

    heavy_pcr_threshold: float = 85.0
    volume_glycogen_threshold: float = 70.0
    pcr_warning: float = 70.0
    glycogen_depleted_warning: float = 50.0
    imtg_warning: float = 60.0


DEFAULT_ENERGY_CONFIG = EnergyConfig()


# ======================================================================
# Phosphocreatine
# ======================================================================


def pcr_depletion(
    reps: int,
    rpe: float,
    set_duration_seconds: float,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> float:
    """PCr used by one set (0-100)."""
    intensity = 1.0 if rpe >= 9 else 0.7 if rpe >= 7 else 0.4
    duration = min(1.0, set_duration_seconds / 60.0)
    rep_range = 1.2 if reps <= 5 else 1.0 if reps <= 10 else 0.6
    return min(FULL, max(0.0, config.pcr_base_depletion * intensity * duration * rep_range))


def recover_pcr(
    level: float,
    rest_seconds: float,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> float:
    """PCr after resting: the deficit decays with a 180 s half-life."""
    if rest_seconds <= 0:
        return level
    deficit = FULL - level
    k = math.log(2.0) / config.pcr_half_life_seconds
    return min(FULL, level + deficit * (1.0 - math.exp(-k * rest_seconds)))


# ======================================================================
# Glycogen
# ======================================================================


def glycogen_depletion(
    reps: int,
    sets: int,
    rpe: float,
    set_duration_seconds: float,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> float:
    """Glycogen used by an exercise entry (0-100)."""
    if 8 <= reps <= 15:
        rep_range = 1.2
    elif reps > 15:
        rep_range = 1.5
    else:
        rep_range = 0.6
    intensity = (rpe - 6.0) / 4.0
    duration = min(1.0, set_duration_seconds / 60.0)
    per_set = config.glycogen_base_depletion * rep_range * intensity * duration
    return min(FULL, max(0.0, per_set * sets))


def recover_glycogen(level: float, hours: float, nutrition_quality: float = 0.8) -> float:
    """Three-phase glycogen resynthesis.

    * 0-2 h: slow, needs nutrients (10 % of the deficit × quality)
    * 2-24 h: fast linear phase (70 % of the deficit × quality)
    * 24-48 h: the remaining deficit closes linearly
    """
    deficit = FULL - level
    if deficit <= 0 or hours <= 0:
        return min(FULL, level)

    if hours <= 2:
        recovered = deficit * (hours / 2.0) * 0.1 * nutrition_quality
    elif hours <= 24:
        phase1 = deficit * 0.1 * nutrition_quality
        phase2 = deficit * ((hours - 2.0) / 22.0) * 0.7 * nutrition_quality
        recovered = phase1 + phase2
    else:
        phase1 = deficit * 0.1 * nutrition_quality
        phase2 = deficit * 0.7 * nutrition_quality
        phase3 = (deficit - phase1 - phase2) * min(1.0, (hours - 24.0) / 24.0)
        recovered = phase1 + phase2 + phase3
    return min(FULL, level + recovered)


# ======================================================================
# Intramuscular triglycerides
# ======================================================================


def imtg_depletion(
    set_duration_seconds: float,
    sets: int,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> float:
    return min(FULL, max(0.0, config.imtg_depletion_per_minute * (set_duration_seconds / 60.0) * sets))


def recover_imtg(level: float, hours: float, config: EnergyConfig = DEFAULT_ENERGY_CONFIG) -> float:
    """Linear refill of the deficit over ``imtg_refill_hours``."""
    deficit = FULL - level
    if deficit <= 0 or hours <= 0:
        return min(FULL, level)
    rate = deficit / config.imtg_refill_hours
    return min(FULL, level + min(deficit, rate * hours))


# ======================================================================
# Sessions
# ======================================================================


def group_workouts(
    observations: Sequence[TrainingObservation],
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> list[list[TrainingObservation]]:
    """Split a history into workouts separated by gaps > ``session_gap_hours``."""
    workouts: list[list[TrainingObservation]] = []
    for obs in sorted(observations, key=lambda o: o.timestamp):
        if workouts and hours_between(workouts[-1][-1].timestamp, obs.timestamp) <= config.session_gap_hours:
            workouts[-1].append(obs)
        else:
            workouts.append([obs])
    return workouts


def compute_session_depletion(
    workout: Sequence[TrainingObservation],
    muscle: MuscleId,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> SessionEnergyDepletion:
    """Energy cost of one workout for *muscle*."""
    pcr = FULL
    glycogen = 0.0
    imtg = 0.0

    for obs in workout:
        exercise = get_exercise(obs.exercise_name, exercises)
        if exercise is None:
            continue
        involvement = exercise.involvement_for(muscle)
        if involvement is None:
            continue
        scale = involvement.percentage / 100.0

        for set_index in range(obs.sets):
            pcr = max(0.0, pcr - pcr_depletion(obs.reps, obs.rpe, obs.set_duration_seconds, config) * scale)
            if set_index < obs.sets - 1:
                pcr = recover_pcr(pcr, obs.rest_interval_seconds, config)

        glycogen += glycogen_depletion(obs.reps, obs.sets, obs.rpe, obs.set_duration_seconds, config) * scale
        imtg += imtg_depletion(obs.set_duration_seconds, obs.sets, config) * scale

    return SessionEnergyDepletion(
        pcr_depletion=FULL - pcr,
        glycogen_depletion=min(FULL, glycogen),
        imtg_depletion=min(FULL, imtg),
        final_pcr=pcr,
    )


# ======================================================================
# History
# ======================================================================


def build_energy_state(
    workouts: Sequence[Sequence[TrainingObservation]],
    muscle: MuscleId,
    now: datetime.datetime,
    nutrition_quality: Optional[float] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> EnergySubstrateState:
    """Energy stores of one muscle at *now* given chronologically grouped workouts."""
    quality = config.default_nutrition_quality if nutrition_quality is None else nutrition_quality
    pcr = glycogen = imtg = FULL
    last_workout: Optional[datetime.datetime] = None

    for index, workout in enumerate(workouts):
        depletion = compute_session_depletion(workout, muscle, exercises, config)
        if depletion.pcr_depletion <= 0 and depletion.glycogen_depletion <= 0 and depletion.imtg_depletion <= 0:
            continue
        start = workout[0].timestamp
        until = workouts[index + 1][0].timestamp if index + 1 < len(workouts) else now
        hours = max(0.0, hours_between(start, until))

        pcr = recover_pcr(max(0.0, pcr - depletion.pcr_depletion), hours * 3600.0, config)
        glycogen = recover_glycogen(max(0.0, glycogen - depletion.glycogen_depletion), hours, quality)
        imtg = recover_imtg(max(0.0, imtg - depletion.imtg_depletion), hours, config)
        last_workout = start

    replenished_at = None
    if last_workout is not None and glycogen < config.replenished_threshold:
        hours_to_full = (FULL - glycogen) / FULL * config.glycogen_replenish_hours
        replenished_at = last_workout + datetime.timedelta(hours=hours_to_full)

    return EnergySubstrateState(
        muscle=muscle,
        pcr=pcr,
        glycogen=glycogen,
        imtg=imtg,
        last_workout_at=last_workout,
        replenished_at=replenished_at,
    )


def build_energy_states(
    observations: Sequence[TrainingObservation],
    now: datetime.datetime,
    *,
    nutrition_quality: Optional[float] = None,
    exercises: Optional[Mapping[str, ExerciseProfile]] = None,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> dict[MuscleId, EnergySubstrateState]:
    """Energy stores for every muscle targeted by the history.

    Args:
        observations: Training history; entries after *now* are ignored.
        now: Reference time.
        nutrition_quality: 0-1 glycogen resynthesis quality (default 0.8).
        exercises: Optional alternative exercise catalog.
        config: Tracker tunables.

    Returns:
        States keyed by muscle, in :class:`MuscleId` order.
    """
    past = [o for o in observations if o.timestamp <= now]
    workouts = group_workouts(past, config)

    targeted: set[MuscleId] = set()
    for obs in past:
        exercise = get_exercise(obs.exercise_name, exercises)
        if exercise is not None:
            targeted.update(inv.muscle for inv in exercise.involvement)

    return {
        muscle: build_energy_state(workouts, muscle, now, nutrition_quality, exercises, config)
        for muscle in MuscleId
        if muscle in targeted
    }


# ======================================================================
# Recommendations
# ======================================================================


def energy_recommendations(
    state: EnergySubstrateState,
    config: EnergyConfig = DEFAULT_ENERGY_CONFIG,
) -> EnergyRecommendations:
    warnings: list[str] = []
    if state.pcr < config.pcr_warning:
        warnings.append("pcr_low")
    if state.glycogen < config.glycogen_depleted_warning:
        warnings.append("glycogen_depleted")
    elif state.glycogen < config.volume_glycogen_threshold:
        warnings.append("glycogen_moderate")
    if state.imtg < config.imtg_warning:
        warnings.append("imtg_low")

    return EnergyRecommendations(
        muscle=state.muscle,
        can_train_heavy=state.pcr >= config.heavy_pcr_threshold,
        can_train_volume=state.glycogen >= config.volume_glycogen_threshold,
        warnings=warnings,
    )
