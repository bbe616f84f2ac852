"""Tests for the connective-tissue stress tracker."""

import datetime

import pytest

from app.catalog.connective_tissue import EXERCISE_STRESS, STRUCTURE_CATALOG, StructureId
from app.recovery.connective_tissue import (
    classify_risk,
    compute_connective_tissue_states,
    compute_exercise_structure_stress,
    compute_occurrence_stress,
    compute_structure_state,
    connective_tissue_recommendations,
    stress_profile_for,
)
from app.schemas.connective_tissue import TissueRiskLevel
from app.schemas.observation import TrainingObservation

NOW = datetime.datetime(2026, 3, 1, 12, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_observation(
    exercise: str = "Barbell Bench Press",
    hours_ago: float = 0.0,
    sets: int = 3,
    rpe: float = 8.0,
    eccentric: bool = False,
    ballistic: bool = False,
) -> TrainingObservation:
    return TrainingObservation(
        timestamp=NOW - datetime.timedelta(hours=hours_ago),
        exercise_name=exercise,
        sets=sets,
        reps=5,
        weight=100.0,
        rpe=rpe,
        is_eccentric=eccentric,
        is_ballistic=ballistic,
    )


def _rotator_cuff_profile():
    return next(
        p for p in EXERCISE_STRESS["Barbell Bench Press"]
        if p.structure == StructureId.ROTATOR_CUFF_TENDONS
    )


def _at(hours_ago: float) -> datetime.datetime:
    return NOW - datetime.timedelta(hours=hours_ago)


# ======================================================================
# Occurrence stress
# ======================================================================


class TestOccurrenceStress:
    def test_volume_and_intensity_scaling(self):
        # 45 × (1 + 2 × 0.15) × (0.5 + 0.5 × 0.8)
        stress = compute_occurrence_stress(_rotator_cuff_profile(), _make_observation())
        assert stress == pytest.approx(52.65)

    def test_eccentric_multiplier(self):
        stress = compute_occurrence_stress(_rotator_cuff_profile(), _make_observation(eccentric=True))
        assert stress == pytest.approx(73.71)

    def test_single_easy_set(self):
        stress = compute_occurrence_stress(_rotator_cuff_profile(), _make_observation(sets=1, rpe=6.0))
        assert stress == pytest.approx(22.5)

    def test_capped_at_100(self):
        obs = _make_observation(sets=20, rpe=10.0, eccentric=True, ballistic=True)
        assert compute_occurrence_stress(_rotator_cuff_profile(), obs) == 100.0

    def test_exercise_loads_every_profiled_structure(self):
        stresses = compute_exercise_structure_stress(_make_observation())
        expected = {p.structure for p in EXERCISE_STRESS["Barbell Bench Press"]}
        assert set(stresses) == expected


class TestStressProfileLookup:
    def test_case_insensitive(self):
        assert stress_profile_for("barbell bench press") == EXERCISE_STRESS["Barbell Bench Press"]

    def test_unknown_exercise_has_no_profile(self):
        assert stress_profile_for("Underwater Basket Weaving") == ()

    def test_unknown_exercise_loads_nothing(self):
        assert compute_exercise_structure_stress(_make_observation(exercise="Mystery Move")) == {}


# ======================================================================
# Risk classification
# ======================================================================


class TestClassifyRisk:
    @pytest.mark.parametrize(
        "stress, expected",
        [
            (65.0, TissueRiskLevel.CRITICAL),
            (50.0, TissueRiskLevel.HIGH),
            (35.0, TissueRiskLevel.MODERATE),
            (34.9, TissueRiskLevel.LOW),
            (0.0, TissueRiskLevel.LOW),
        ],
    )
    def test_relative_to_threshold(self, stress, expected):
        assert classify_risk(stress, 50.0) == expected

    def test_threshold_is_per_structure(self):
        assert classify_risk(60.0, 50.0) == TissueRiskLevel.HIGH
        assert classify_risk(60.0, 90.0) == TissueRiskLevel.LOW


# ======================================================================
# Structure state
# ======================================================================


class TestStructureState:
    def test_non_cumulative_keeps_largest(self):
        acl = STRUCTURE_CATALOG[StructureId.ACL]
        state = compute_structure_state(
            acl,
            [(_at(480), "Bulgarian Split Squat", 60.0), (_at(0), "Bulgarian Split Squat", 40.0)],
            NOW,
        )
        assert state.stress == pytest.approx(40.0)
        assert state.cumulative is False

    def test_cumulative_sums(self):
        cuff = STRUCTURE_CATALOG[StructureId.ROTATOR_CUFF_TENDONS]
        state = compute_structure_state(
            cuff,
            [(_at(288), "Barbell Bench Press", 60.0), (_at(0), "Barbell Bench Press", 50.0)],
            NOW,
        )
        assert state.stress == pytest.approx(80.0)
        assert state.is_at_risk
        assert state.risk_level == TissueRiskLevel.HIGH
        assert state.recovery == pytest.approx(20.0)

    def test_occurrences_sorted_with_remaining_stress(self):
        cuff = STRUCTURE_CATALOG[StructureId.ROTATOR_CUFF_TENDONS]
        state = compute_structure_state(
            cuff,
            [(_at(0), "Barbell Bench Press", 50.0), (_at(288), "Pull-Up", 60.0)],
            NOW,
        )
        assert [o.exercise_name for o in state.occurrences] == ["Pull-Up", "Barbell Bench Press"]
        assert state.occurrences[0].remaining_stress == pytest.approx(30.0)
        assert state.last_stressed_at == NOW

    def test_no_occurrences(self):
        state = compute_structure_state(STRUCTURE_CATALOG[StructureId.ACL], [], NOW)
        assert state.stress == 0.0
        assert state.risk_level == TissueRiskLevel.LOW
        assert state.recovered_at is None
        assert state.last_stressed_at is None

    def test_recovered_at_in_future_when_stressed(self):
        state = compute_structure_state(
            STRUCTURE_CATALOG[StructureId.ACL], [(_at(0), "Bulgarian Split Squat", 40.0)], NOW,
        )
        assert state.recovered_at is not None
        assert state.recovered_at > NOW


# ======================================================================
# History
# ======================================================================


class TestConnectiveTissueStates:
    def test_structure_order(self):
        states = compute_connective_tissue_states([_make_observation()], NOW)
        assert list(states) == [
            StructureId.ROTATOR_CUFF_TENDONS,
            StructureId.SUBACROMIAL_BURSA,
            StructureId.BICEPS_TENDON,
            StructureId.TRICEPS_TENDON,
            StructureId.WRIST_EXTENSOR_TENDONS,
        ]

    def test_future_observations_ignored(self):
        future = _make_observation(hours_ago=-2.0)
        assert compute_connective_tissue_states([future], NOW) == {}

    def test_min_stress_filters(self):
        states = compute_connective_tissue_states([_make_observation()], NOW, min_stress=50.0)
        assert StructureId.ROTATOR_CUFF_TENDONS in states
        assert StructureId.WRIST_EXTENSOR_TENDONS not in states

    def test_empty_history(self):
        assert compute_connective_tissue_states([], NOW) == {}


# ======================================================================
# Recommendations
# ======================================================================


class TestRecommendations:
    def test_nothing_stressed(self):
        recs = connective_tissue_recommendations({})
        assert not recs.should_rest
        assert not recs.should_deload
        assert recs.recommendations == []

    def test_critical_structure_means_rest(self):
        acl = STRUCTURE_CATALOG[StructureId.ACL]
        state = compute_structure_state(acl, [(_at(0), "Bulgarian Split Squat", 80.0)], NOW)
        recs = connective_tissue_recommendations({StructureId.ACL: state})
        assert recs.should_rest
        assert recs.critical == [StructureId.ACL]
        assert recs.at_risk == [StructureId.ACL]
        assert "rest_critical_structures" in recs.recommendations
        assert "avoid_eccentric_and_ballistic_work" in recs.recommendations

    def test_moderate_structure_means_deload(self):
        acl = STRUCTURE_CATALOG[StructureId.ACL]
        state = compute_structure_state(acl, [(_at(0), "Bulgarian Split Squat", 40.0)], NOW)
        recs = connective_tissue_recommendations({StructureId.ACL: state})
        assert not recs.should_rest
        assert recs.should_deload
        assert recs.at_risk == []
        assert recs.recommendations == ["reduce_load_on_stressed_structures"]
