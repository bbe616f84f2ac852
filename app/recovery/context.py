"""
Contextual modifier calculator — lifestyle factors → recovery capacity.

Five independent multiplicative factors (1.0 = neutral):

    sleep         0.50 - 1.20   hours, quality, interruptions
    nutrition     0.70 - 1.15   protein, carbs, calorie balance, hydration, timing
    stress        0.60 - 1.05   perceived/work/life stress, resting HR, HRV
    training_age  0.70 - 1.20   experience tier, age, injuries, conditions
    cycle         0.85 - 1.10   menstrual phase and symptoms (female only)

The overall capacity is their product, clamped to 0.4 - 1.4.  Any factor
below 0.9 is reported as a *limiting factor* with a machine-readable
recommendation id.

Missing data is treated as average, except nutrition which defaults to
slightly sub-optimal (0.95).
"""

from __future__ import annotations

from typing import Optional, Sequence

from app.schemas.context import (
    CalorieBalance,
    ContextBundle,
    ContextModifiers,
    CyclePhase,
    Demographics,
    ExperienceLevel,
    HydrationLevel,
    LimitingFactor,
    MealTiming,
    MenstrualCycleRecord,
    NutritionRecord,
    Sex,
    SleepQuality,
    SleepRecord,
    StressRecord,
)

# ======================================================================
# Tables
# ======================================================================

# (min_hours, modifier) checked top-down; 8-9 h is handled separately.
_SLEEP_HOURS_STEPS: list[tuple[float, float]] = [
    (7.0, 1.0),
    (6.0, 0.85),
    (5.0, 0.7),
]
_SLEEP_OPTIMAL = (8.0, 9.0, 1.1)
_SLEEP_FLOOR = 0.55

_SLEEP_QUALITY_SCORE: dict[SleepQuality, int] = {
    SleepQuality.POOR: 1,
    SleepQuality.FAIR: 2,
    SleepQuality.GOOD: 3,
    SleepQuality.EXCELLENT: 4,
}

_CALORIE_ADJUSTMENT: dict[CalorieBalance, float] = {
    CalorieBalance.SURPLUS: 0.05,
    CalorieBalance.MAINTENANCE: 0.0,
    CalorieBalance.DEFICIT: -0.15,
}

_HYDRATION_ADJUSTMENT: dict[HydrationLevel, float] = {
    HydrationLevel.POOR: -0.1,
    HydrationLevel.FAIR: -0.03,
    HydrationLevel.GOOD: 0.0,
    HydrationLevel.EXCELLENT: 0.03,
}

_MEAL_TIMING_ADJUSTMENT: dict[MealTiming, float] = {
    MealTiming.POOR: -0.08,
    MealTiming.FAIR: -0.02,
    MealTiming.GOOD: 0.03,
}

_EXPERIENCE_BASE: dict[ExperienceLevel, float] = {
    ExperienceLevel.BEGINNER: 1.15,
    ExperienceLevel.INTERMEDIATE: 1.0,
    ExperienceLevel.ADVANCED: 0.93,
    ExperienceLevel.ELITE: 0.88,
}

_CYCLE_PHASE: dict[CyclePhase, float] = {
    CyclePhase.FOLLICULAR: 1.05,
    CyclePhase.OVULATION: 1.08,
    CyclePhase.LUTEAL: 0.92,
    CyclePhase.MENSTRUATION: 0.88,
}

_CYCLE_SYMPTOMS: dict[str, float] = {
    "severe_cramps": 0.1,
    "extreme_fatigue": 0.12,
    "heavy_bleeding": 0.08,
}

_NO_NUTRITION = 0.95
_LIMITING_THRESHOLD = 0.9
_OVERALL_BOUNDS = (0.4, 1.4)

DEFAULT_DEMOGRAPHICS = Demographics()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ======================================================================
# Individual factors
# ======================================================================


def sleep_modifier(records: Sequence[SleepRecord]) -> float:
    """Average sleep over the window → 0.5-1.2."""
    if not records:
        return 1.0
    n = len(records)
    avg_hours = sum(r.hours for r in records) / n
    avg_quality = sum(_SLEEP_QUALITY_SCORE[r.quality] for r in records) / n
    avg_interruptions = sum(r.interruptions for r in records) / n

    low, high, best = _SLEEP_OPTIMAL
    if low <= avg_hours <= high:
        modifier = best
    else:
        modifier = _SLEEP_FLOOR
        for min_hours, value in _SLEEP_HOURS_STEPS:
            if avg_hours >= min_hours:
                modifier = value
                break

    modifier += (avg_quality - 2.5) * 0.06
    modifier -= min(0.2, avg_interruptions * 0.03)
    return _clamp(modifier, 0.5, 1.2)


def nutrition_modifier(record: Optional[NutritionRecord]) -> float:
    if record is None:
        return _NO_NUTRITION
    modifier = 1.0

    protein = record.protein_g_per_kg
    if 1.6 <= protein <= 2.5:
        modifier += 0.05
    elif protein >= 1.2:
        pass
    elif protein >= 0.8:
        modifier -= 0.1
    else:
        modifier -= 0.2

    carbs = record.carbs_g_per_kg
    if 3.0 <= carbs <= 7.0:
        modifier += 0.05
    elif carbs < 2.0:
        modifier -= 0.1

    modifier += _CALORIE_ADJUSTMENT[record.calorie_balance]
    modifier += _HYDRATION_ADJUSTMENT[record.hydration]
    modifier += _MEAL_TIMING_ADJUSTMENT[record.meal_timing]
    return _clamp(modifier, 0.7, 1.15)


def nutrition_quality(record: Optional[NutritionRecord]) -> Optional[float]:
    """Glycogen resynthesis quality (0-1) implied by a nutrition record.

    ``None`` when there is no record, so the energy tracker uses its own
    default.
    """
    if record is None:
        return None
    return _clamp(nutrition_modifier(record) / 1.15, 0.0, 1.0)


def stress_modifier(record: Optional[StressRecord]) -> float:
    if record is None:
        return 1.0
    modifier = 1.0

    perceived = record.perceived_stress
    if perceived <= 3:
        modifier += 0.05
    elif perceived <= 5:
        pass
    elif perceived <= 7:
        modifier -= 0.15
    else:
        modifier -= 0.3

    if record.work_stress + record.life_stress > 14:
        modifier -= 0.1

    hr = record.resting_heart_rate
    if hr is not None:
        if hr > 80:
            modifier -= 0.15
        elif hr > 75:
            modifier -= 0.08
        elif hr < 60:
            modifier += 0.03

    hrv = record.hrv_ms
    if hrv is not None:
        if hrv < 40:
            modifier -= 0.2
        elif hrv < 60:
            modifier -= 0.05
        elif hrv > 80:
            modifier += 0.05

    return _clamp(modifier, 0.6, 1.05)


def training_age_modifier(demographics: Demographics) -> float:
    modifier = _EXPERIENCE_BASE[demographics.experience]
    if demographics.age > 30:
        modifier -= (demographics.age - 30) * 0.008
    elif demographics.age < 25:
        modifier += 0.05
    modifier -= len(demographics.active_injuries) * 0.08
    modifier -= len(demographics.chronic_conditions) * 0.05
    return _clamp(modifier, 0.7, 1.2)


def cycle_modifier(record: Optional[MenstrualCycleRecord]) -> float:
    if record is None or record.phase == CyclePhase.UNKNOWN or record.hormonal_contraception:
        return 1.0
    modifier = _CYCLE_PHASE.get(record.phase, 1.0)
    for symptom, penalty in _CYCLE_SYMPTOMS.items():
        if symptom in record.symptoms:
            modifier -= penalty
    return _clamp(modifier, 0.85, 1.1)


# ======================================================================
# Overall
# ======================================================================


def _limiting_factors(
    sleep: float,
    nutrition: float,
    stress: float,
    training_age: float,
    cycle: float,
    demographics: Demographics,
) -> list[LimitingFactor]:
    factors: list[LimitingFactor] = []
    if sleep < _LIMITING_THRESHOLD:
        factors.append(LimitingFactor(factor="sleep", modifier=sleep, recommendation="improve_sleep"))
    if nutrition < _LIMITING_THRESHOLD:
        factors.append(LimitingFactor(factor="nutrition", modifier=nutrition,
                                      recommendation="increase_protein_and_carbs"))
    if stress < _LIMITING_THRESHOLD:
        factors.append(LimitingFactor(factor="stress", modifier=stress, recommendation="manage_stress_or_deload"))
    if training_age < _LIMITING_THRESHOLD:
        if demographics.active_injuries:
            factors.append(LimitingFactor(factor="active_injuries", modifier=training_age,
                                          recommendation="train_around_injuries"))
        else:
            factors.append(LimitingFactor(factor="training_status", modifier=training_age,
                                          recommendation="add_rest_days"))
    if cycle < _LIMITING_THRESHOLD and demographics.sex == Sex.FEMALE:
        factors.append(LimitingFactor(factor="menstrual_cycle", modifier=cycle,
                                      recommendation="reduce_volume_during_phase"))
    return factors


def compute_context_modifiers(bundle: Optional[ContextBundle] = None) -> ContextModifiers:
    """Overall recovery capacity from a user's context bundle.

    Args:
        bundle: Sleep window, latest nutrition/stress records,
            demographics and cycle record.  ``None`` → all neutral
            defaults (nutrition 0.95).

    Returns:
        :class:`ContextModifiers` with every factor, the clamped product
        and the limiting factors.
    """
    bundle = bundle or ContextBundle()
    demographics = bundle.demographics or DEFAULT_DEMOGRAPHICS

    sleep = sleep_modifier(bundle.sleep)
    nutrition = nutrition_modifier(bundle.nutrition)
    stress = stress_modifier(bundle.stress)
    training_age = training_age_modifier(demographics)
    cycle = cycle_modifier(bundle.cycle) if demographics.sex == Sex.FEMALE else 1.0

    overall = _clamp(sleep * nutrition * stress * training_age * cycle, *_OVERALL_BOUNDS)

    return ContextModifiers(
        sleep=sleep,
        nutrition=nutrition,
        stress=stress,
        training_age=training_age,
        cycle=cycle,
        overall=overall,
        limiting_factors=_limiting_factors(sleep, nutrition, stress, training_age, cycle, demographics),
    )
