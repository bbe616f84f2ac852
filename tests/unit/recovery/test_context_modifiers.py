"""Tests for the lifestyle context modifiers."""

import datetime

import pytest

from app.recovery.context import (
    compute_context_modifiers,
    cycle_modifier,
    nutrition_modifier,
    nutrition_quality,
    sleep_modifier,
    stress_modifier,
    training_age_modifier,
)
from app.schemas.context import (
    CalorieBalance,
    ContextBundle,
    CyclePhase,
    Demographics,
    ExperienceLevel,
    HydrationLevel,
    MealTiming,
    MenstrualCycleRecord,
    NutritionRecord,
    Sex,
    SleepQuality,
    SleepRecord,
    StressRecord,
)

TODAY = datetime.date(2026, 3, 1)


# ======================================================================
# Helpers
# ======================================================================


def _make_sleep(hours: float, quality: SleepQuality = SleepQuality.FAIR, interruptions: int = 0) -> SleepRecord:
    return SleepRecord(date=TODAY, hours=hours, quality=quality, interruptions=interruptions)


def _make_good_nutrition() -> NutritionRecord:
    return NutritionRecord(
        date=TODAY,
        protein_g_per_kg=2.0,
        carbs_g_per_kg=4.0,
        calorie_balance=CalorieBalance.MAINTENANCE,
        hydration=HydrationLevel.GOOD,
        meal_timing=MealTiming.GOOD,
    )


def _make_cycle(phase: CyclePhase, symptoms=(), contraception: bool = False) -> MenstrualCycleRecord:
    return MenstrualCycleRecord(date=TODAY, phase=phase, symptoms=list(symptoms),
                                hormonal_contraception=contraception)


# ======================================================================
# Sleep
# ======================================================================


class TestSleep:
    def test_no_records_is_neutral(self):
        assert sleep_modifier([]) == 1.0

    def test_optimal_sleep(self):
        assert sleep_modifier([_make_sleep(9.0, SleepQuality.EXCELLENT)]) == pytest.approx(1.19)

    def test_adequate_fair_sleep(self):
        assert sleep_modifier([_make_sleep(7.5)]) == pytest.approx(0.97)

    def test_short_interrupted_sleep_clamped(self):
        assert sleep_modifier([_make_sleep(4.0, SleepQuality.POOR, interruptions=2)]) == pytest.approx(0.5)

    def test_averages_over_window(self):
        records = [_make_sleep(6.0), _make_sleep(8.0)]
        assert sleep_modifier(records) == sleep_modifier([_make_sleep(7.0)])


# ======================================================================
# Nutrition
# ======================================================================


class TestNutrition:
    def test_missing_record_slightly_suboptimal(self):
        assert nutrition_modifier(None) == pytest.approx(0.95)
        assert nutrition_quality(None) is None

    def test_good_nutrition(self):
        assert nutrition_modifier(_make_good_nutrition()) == pytest.approx(1.13)
        assert nutrition_quality(_make_good_nutrition()) == pytest.approx(1.13 / 1.15)

    def test_poor_nutrition_clamped(self):
        record = NutritionRecord(
            date=TODAY,
            protein_g_per_kg=0.5,
            carbs_g_per_kg=1.0,
            calorie_balance=CalorieBalance.DEFICIT,
            hydration=HydrationLevel.POOR,
            meal_timing=MealTiming.POOR,
        )
        assert nutrition_modifier(record) == pytest.approx(0.7)


# ======================================================================
# Stress
# ======================================================================


class TestStress:
    def test_missing_record_neutral(self):
        assert stress_modifier(None) == 1.0

    def test_low_stress(self):
        record = StressRecord(date=TODAY, perceived_stress=2, work_stress=2, life_stress=2)
        assert stress_modifier(record) == pytest.approx(1.05)

    def test_high_stress_clamped(self):
        record = StressRecord(date=TODAY, perceived_stress=8, work_stress=8, life_stress=8,
                              resting_heart_rate=85)
        assert stress_modifier(record) == pytest.approx(0.6)

    @pytest.mark.parametrize(
        "hrv, expected",
        [
            (30.0, 0.8),
            (50.0, 0.95),
            (70.0, 1.0),
            (90.0, 1.05),
        ],
    )
    def test_hrv(self, hrv, expected):
        record = StressRecord(date=TODAY, perceived_stress=5, work_stress=5, life_stress=5, hrv_ms=hrv)
        assert stress_modifier(record) == pytest.approx(expected)


# ======================================================================
# Training age
# ======================================================================


class TestTrainingAge:
    def test_intermediate_thirty_is_neutral(self):
        assert training_age_modifier(Demographics()) == pytest.approx(1.0)

    def test_beginner_young(self):
        demo = Demographics(age=20, experience=ExperienceLevel.BEGINNER)
        assert training_age_modifier(demo) == pytest.approx(1.2)

    def test_older_advanced(self):
        demo = Demographics(age=40, experience=ExperienceLevel.ADVANCED)
        assert training_age_modifier(demo) == pytest.approx(0.85)

    def test_injuries_and_conditions(self):
        demo = Demographics(active_injuries=["knee"], chronic_conditions=["asthma"])
        assert training_age_modifier(demo) == pytest.approx(0.87)


# ======================================================================
# Menstrual cycle
# ======================================================================


class TestCycle:
    @pytest.mark.parametrize(
        "phase, expected",
        [
            (CyclePhase.FOLLICULAR, 1.05),
            (CyclePhase.OVULATION, 1.08),
            (CyclePhase.LUTEAL, 0.92),
            (CyclePhase.MENSTRUATION, 0.88),
            (CyclePhase.UNKNOWN, 1.0),
        ],
    )
    def test_phase(self, phase, expected):
        assert cycle_modifier(_make_cycle(phase)) == pytest.approx(expected)

    def test_symptoms_clamped(self):
        record = _make_cycle(CyclePhase.LUTEAL, symptoms=["severe_cramps"])
        assert cycle_modifier(record) == pytest.approx(0.85)

    def test_hormonal_contraception_neutral(self):
        assert cycle_modifier(_make_cycle(CyclePhase.MENSTRUATION, contraception=True)) == 1.0


# ======================================================================
# Overall
# ======================================================================


class TestContextModifiers:
    def test_empty_bundle(self):
        modifiers = compute_context_modifiers()
        assert modifiers.overall == pytest.approx(0.95)
        assert modifiers.limiting_factors == []

    def test_optimal_context_boosts_recovery(self):
        bundle = ContextBundle(
            sleep=[_make_sleep(9.0, SleepQuality.EXCELLENT)],
            nutrition=_make_good_nutrition(),
            stress=StressRecord(date=TODAY, perceived_stress=2, work_stress=2, life_stress=2),
            demographics=Demographics(age=30, experience=ExperienceLevel.INTERMEDIATE),
        )
        modifiers = compute_context_modifiers(bundle)
        assert modifiers.overall > 1.0
        assert modifiers.overall <= 1.4
        assert modifiers.limiting_factors == []

    def test_limiting_factors_reported(self):
        bundle = ContextBundle(
            sleep=[_make_sleep(4.0, SleepQuality.POOR)],
            stress=StressRecord(date=TODAY, perceived_stress=9, work_stress=5, life_stress=5),
            demographics=Demographics(active_injuries=["shoulder", "knee"]),
        )
        modifiers = compute_context_modifiers(bundle)
        factors = {f.factor: f.recommendation for f in modifiers.limiting_factors}
        assert factors == {
            "sleep": "improve_sleep",
            "stress": "manage_stress_or_deload",
            "active_injuries": "train_around_injuries",
        }

    def test_cycle_ignored_for_male(self):
        bundle = ContextBundle(
            demographics=Demographics(sex=Sex.MALE),
            cycle=_make_cycle(CyclePhase.MENSTRUATION),
        )
        assert compute_context_modifiers(bundle).cycle == 1.0

    def test_cycle_limiting_for_female(self):
        bundle = ContextBundle(
            demographics=Demographics(sex=Sex.FEMALE),
            cycle=_make_cycle(CyclePhase.MENSTRUATION),
        )
        modifiers = compute_context_modifiers(bundle)
        assert modifiers.cycle == pytest.approx(0.88)
        assert [f.factor for f in modifiers.limiting_factors] == ["menstrual_cycle"]

    def test_overall_clamped_low(self):
        bundle = ContextBundle(
            sleep=[_make_sleep(3.0, SleepQuality.POOR, interruptions=10)],
            stress=StressRecord(date=TODAY, perceived_stress=10, work_stress=10, life_stress=10),
            demographics=Demographics(age=70, experience=ExperienceLevel.ELITE),
        )
        assert compute_context_modifiers(bundle).overall == pytest.approx(0.4)
