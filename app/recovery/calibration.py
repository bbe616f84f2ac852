"""
Bayesian calibration layer — per-user recovery half-lives.

Population half-lives are only a starting point: individuals recover
faster or slower.  Each ``"{entity}_halfLife"`` parameter starts at the
population prior and is refined with a conjugate normal-normal update
every time a closed-loop observation arrives:

    prior precision      τ₀ = 1 / σ_user²
    data precision       τ₁ = 1 / (σ_pop² / max(0.1, confidence))
    posterior precision  τ  = τ₀ + τ₁
    posterior mean       μ  = (τ₀ μ_user + τ₁ x) / τ

Posterior variance therefore never increases.

Confidence tiers combine observation count with relative uncertainty
σ/μ.  Observations more than 3 σ_pop from the population mean are
flagged as anomalous; they are still incorporated unless
``CalibrationConfig.reject_anomalies`` is set.

This module is pure: it takes and returns parameter values.  Persistence
and per-user serialisation live in
:class:`app.services.calibration_service.CalibrationService`.
"""

from __future__ import annotations

import datetime
import math
from typing import Iterable, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, Field

from app.catalog.exercises import get_exercise
from app.catalog.muscles import DEFAULT_MUSCLE_HALF_LIFE, get_muscle
from app.schemas.calibration import (
    CONFIDENCE_SCORES,
    CalibrationBatch,
    CalibrationState,
    CalibrationSummary,
    CalibrationUpdate,
    ConfidenceLevel,
    HalfLifeObservation,
    PerformanceRecoveryObservation,
    RecoveryParameter,
    SubjectiveRecoveryRating,
)

HALF_LIFE_SUFFIX = "_halfLife"

# ======================================================================
# Configuration
# ======================================================================

# (tier, min_count, max_relative_uncertainty) checked top-down.
_CONFIDENCE_TIERS: list[tuple[ConfidenceLevel, int, float]] = [
    (ConfidenceLevel.VERY_HIGH, 20, 0.15),
    (ConfidenceLevel.HIGH, 10, 0.25),
    (ConfidenceLevel.MEDIUM, 5, 0.35),
    (ConfidenceLevel.LOW, 2, float("inf")),
]


class CalibrationConfig(BaseModel):
    """Tunables for the Bayesian calibration layer."""

    anomaly_z_threshold: float = Field(3.0, gt=0.0)
    reject_anomalies: bool = Field(
        False,
        description="Discard observations beyond the z-threshold instead of incorporating them",
    )
    shrinkage_rate: float = Field(0.2, gt=0.0)
    prior_std_fraction: float = Field(0.25, gt=0.0, description="σ_pop as a fraction of μ_pop")
    default_mean: float = DEFAULT_MUSCLE_HALF_LIFE
    default_std: float = 12.0
    min_observation_confidence: float = Field(0.1, gt=0.0, le=1.0)
    subjective_confidence: float = Field(0.7, gt=0.0, le=1.0)
    performance_confidence: float = Field(0.85, gt=0.0, le=1.0)
    summary_size: int = Field(5, ge=1)


DEFAULT_CALIBRATION_CONFIG = CalibrationConfig()


# ======================================================================
# Naming and priors
# ======================================================================


def canonical_entity(entity: str) -> str:
    """Canonical muscle or exercise name; unknown names are returned stripped."""
    muscle = get_muscle(entity)
    if muscle is not None:
        return muscle.muscle.value
    exercise = get_exercise(entity)
    if exercise is not None:
        return exercise.name
    return entity.strip()


def parameter_name(entity: str) -> str:
    return f"{canonical_entity(entity)}{HALF_LIFE_SUFFIX}"


def population_prior(
    entity: str,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> tuple[float, float]:
    """``(mean, std)`` half-life prior for *entity* from the reference tables."""
    muscle = get_muscle(entity)
    if muscle is not None:
        return muscle.half_life_hours, muscle.half_life_hours * config.prior_std_fraction
    exercise = get_exercise(entity)
    if exercise is not None:
        return exercise.half_life_hours, exercise.half_life_hours * config.prior_std_fraction
    return config.default_mean, config.default_std


def initialize_parameter(
    name: str,
    population_mean: float,
    population_std: float,
    now: Optional[datetime.datetime] = None,
) -> RecoveryParameter:
    """New parameter sitting exactly on the population prior."""
    return RecoveryParameter(
        parameter_name=name,
        population_mean=population_mean,
        population_std=population_std,
        user_mean=population_mean,
        user_std=population_std,
        observation_count=0,
        confidence=ConfidenceLevel.VERY_LOW,
        state=CalibrationState.POPULATION_ONLY,
        last_updated=now or datetime.datetime.utcnow(),
    )


def initialize_for_entity(
    entity: str,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
    now: Optional[datetime.datetime] = None,
) -> RecoveryParameter:
    mean, std = population_prior(entity, config)
    return initialize_parameter(parameter_name(entity), mean, std, now)


# ======================================================================
# Confidence
# ======================================================================


def confidence_tier(observation_count: int, user_mean: float, user_std: float) -> ConfidenceLevel:
    relative = user_std / user_mean if user_mean > 0 else float("inf")
    for tier, min_count, max_relative in _CONFIDENCE_TIERS:
        if observation_count >= min_count and relative < max_relative:
            return tier
    return ConfidenceLevel.VERY_LOW


def calibration_state(parameter: Optional[RecoveryParameter]) -> CalibrationState:
    if parameter is None:
        return CalibrationState.UNINITIALIZED
    if parameter.observation_count == 0:
        return CalibrationState.POPULATION_ONLY
    if CONFIDENCE_SCORES[parameter.confidence] >= CONFIDENCE_SCORES[ConfidenceLevel.MEDIUM]:
        return CalibrationState.CALIBRATED
    return CalibrationState.CALIBRATING


def shrinkage_factor(observation_count: int, config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG) -> float:
    """Weight still given to the population prior: exp(-0.2 n)."""
    return math.exp(-config.shrinkage_rate * observation_count)


# ======================================================================
# Update
# ======================================================================


def z_score(parameter: RecoveryParameter, observed: float) -> float:
    return abs(observed - parameter.population_mean) / parameter.population_std


def update_parameter(
    parameter: RecoveryParameter,
    observed: float,
    confidence: float,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
    now: Optional[datetime.datetime] = None,
) -> tuple[RecoveryParameter, CalibrationUpdate]:
    """Conjugate update of one parameter with one observation.

    Args:
        parameter: Current parameter.
        observed: Observed half-life (hours, > 0).
        confidence: Trust in the observation, in (0, 1].
        config: Calibration tunables.
        now: Timestamp recorded as ``last_updated``.

    Returns:
        ``(new_parameter, update)``.  When the observation is rejected as
        an anomaly, ``new_parameter`` is *parameter* unchanged.

    Raises:
        ValueError: If *observed* or *confidence* is out of range.
    """
    if observed <= 0 or not math.isfinite(observed):
        raise ValueError(f"observed half-life must be positive, got {observed}")
    if not 0.0 < confidence <= 1.0:
        raise ValueError(f"confidence must be in (0, 1], got {confidence}")

    z = z_score(parameter, observed)
    anomalous = z > config.anomaly_z_threshold
    if anomalous:
        logger.warning(
            f"[CALIBRATION] Anomalous observation for {parameter.parameter_name}: "
            f"observed={observed:.1f} z={z:.2f}"
        )

    if anomalous and config.reject_anomalies:
        return parameter, CalibrationUpdate(
            parameter_name=parameter.parameter_name,
            observed_value=observed,
            prior_mean=parameter.user_mean,
            posterior_mean=parameter.user_mean,
            posterior_std=parameter.user_std,
            observation_count=parameter.observation_count,
            confidence=parameter.confidence,
            z_score=z,
            anomalous=True,
            incorporated=False,
        )

    prior_precision = 1.0 / parameter.user_std ** 2
    data_variance = parameter.population_std ** 2 / max(config.min_observation_confidence, confidence)
    data_precision = 1.0 / data_variance

    posterior_precision = prior_precision + data_precision
    posterior_mean = (prior_precision * parameter.user_mean + data_precision * observed) / posterior_precision
    posterior_std = math.sqrt(1.0 / posterior_precision)
    count = parameter.observation_count + 1
    tier = confidence_tier(count, posterior_mean, posterior_std)

    updated = parameter.model_copy(update={
        "user_mean": posterior_mean,
        "user_std": posterior_std,
        "observation_count": count,
        "confidence": tier,
        "last_updated": now or datetime.datetime.utcnow(),
    })
    updated = updated.model_copy(update={"state": calibration_state(updated)})

    return updated, CalibrationUpdate(
        parameter_name=parameter.parameter_name,
        observed_value=observed,
        prior_mean=parameter.user_mean,
        posterior_mean=posterior_mean,
        posterior_std=posterior_std,
        observation_count=count,
        confidence=tier,
        z_score=z,
        anomalous=anomalous,
        incorporated=True,
    )


# ======================================================================
# Inference from indirect evidence
# ======================================================================


def _half_life_from_recovery(hours: float, recovery_pct: float) -> float:
    """Solve ``recovery = 1 - exp(-ln2 t / hl)`` for ``hl``."""
    remaining = min(0.99, max(0.01, 1.0 - recovery_pct / 100.0))
    return -math.log(2.0) * hours / math.log(remaining)


def infer_half_life_from_rating(
    rating: SubjectiveRecoveryRating,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> HalfLifeObservation:
    """Half-life implied by a self-rated recovery percentage."""
    return HalfLifeObservation(
        entity=rating.entity,
        observed_half_life=_half_life_from_recovery(rating.hours_since_training, rating.recovery_rating),
        confidence=config.subjective_confidence,
        observed_at=rating.observed_at,
    )


def infer_half_life_from_performance(
    observation: PerformanceRecoveryObservation,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> HalfLifeObservation:
    """Half-life implied by the volume achieved relative to baseline."""
    recovery = min(100.0, observation.volume_ratio * 100.0)
    return HalfLifeObservation(
        entity=observation.entity,
        observed_half_life=_half_life_from_recovery(observation.hours_since_training, recovery),
        confidence=config.performance_confidence,
        observed_at=observation.observed_at,
    )


def batch_observations(
    batch: CalibrationBatch,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> list[HalfLifeObservation]:
    """Flatten a batch into direct half-life observations, in input order."""
    observations = list(batch.half_lives)
    observations.extend(infer_half_life_from_rating(r, config) for r in batch.subjective)
    observations.extend(infer_half_life_from_performance(p, config) for p in batch.performance)
    return observations


def apply_batch(
    parameters: Mapping[str, RecoveryParameter],
    observations: Iterable[HalfLifeObservation],
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
    now: Optional[datetime.datetime] = None,
) -> tuple[dict[str, RecoveryParameter], list[CalibrationUpdate]]:
    """Apply observations in order, seeding missing parameters from the prior.

    Returns:
        ``(parameters, updates)`` where *parameters* is a new mapping
        holding every input parameter plus any created or updated ones.
    """
    result = dict(parameters)
    updates: list[CalibrationUpdate] = []
    for obs in observations:
        name = parameter_name(obs.entity)
        current = result.get(name) or initialize_for_entity(obs.entity, config, now)
        result[name], update = update_parameter(current, obs.observed_half_life, obs.confidence, config, now)
        updates.append(update)
    return result, updates


# ======================================================================
# Lookups
# ======================================================================


def calibrated_half_life(
    entity: str,
    parameters: Mapping[str, RecoveryParameter],
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> float:
    """User half-life when calibrated at least once, else the population value."""
    parameter = parameters.get(parameter_name(entity))
    if parameter is not None and parameter.observation_count > 0:
        return parameter.user_mean
    return population_prior(entity, config)[0]


def half_life_overrides(parameters: Iterable[RecoveryParameter]) -> dict[str, float]:
    """Entity → user half-life for every parameter with at least one observation."""
    return {
        p.entity: p.user_mean
        for p in parameters
        if p.parameter_name.endswith(HALF_LIFE_SUFFIX) and p.observation_count > 0
    }


def summarize(
    parameters: Iterable[RecoveryParameter],
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> CalibrationSummary:
    """Calibration progress across all of a user's parameters."""
    params = list(parameters)
    calibrated = [p for p in params if p.observation_count > 0]
    scores = [CONFIDENCE_SCORES[p.confidence] for p in calibrated]
    shrinkage = [shrinkage_factor(p.observation_count, config) for p in calibrated]

    ranked = sorted(
        params,
        key=lambda p: (CONFIDENCE_SCORES[p.confidence], p.observation_count),
        reverse=True,
    )
    n = config.summary_size
    return CalibrationSummary(
        total_parameters=len(params),
        calibrated_parameters=len(calibrated),
        total_observations=sum(p.observation_count for p in params),
        average_confidence_score=sum(scores) / len(scores) if scores else 0.0,
        population_weight=sum(shrinkage) / len(shrinkage) if shrinkage else 1.0,
        most_confident=ranked[:n],
        least_confident=list(reversed(ranked[-n:])) if ranked else [],
    )
