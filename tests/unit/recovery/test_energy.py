"""Tests for the PCr / glycogen / IMTG energy tracker."""

import datetime

import pytest

from app.catalog.muscles import MuscleId
from app.recovery.energy import (
    build_energy_state,
    build_energy_states,
    compute_session_depletion,
    energy_recommendations,
    glycogen_depletion,
    group_workouts,
    imtg_depletion,
    pcr_depletion,
    recover_glycogen,
    recover_imtg,
    recover_pcr,
)
from app.schemas.energy import EnergySubstrateState
from app.schemas.observation import TrainingObservation

NOW = datetime.datetime(2026, 3, 1, 12, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_observation(
    hours_ago: float = 0.0,
    exercise: str = "Barbell Bench Press",
    sets: int = 2,
    reps: int = 5,
    rpe: float = 10.0,
    duration: float = 45.0,
    rest: float = 180.0,
) -> TrainingObservation:
    return TrainingObservation(
        timestamp=NOW - datetime.timedelta(hours=hours_ago),
        exercise_name=exercise,
        sets=sets,
        reps=reps,
        weight=100.0,
        rpe=rpe,
        set_duration_seconds=duration,
        rest_interval_seconds=rest,
    )


def _make_state(pcr: float = 100.0, glycogen: float = 100.0, imtg: float = 100.0) -> EnergySubstrateState:
    return EnergySubstrateState(muscle=MuscleId.CHEST, pcr=pcr, glycogen=glycogen, imtg=imtg)


# ======================================================================
# Phosphocreatine
# ======================================================================


class TestPCr:
    def test_heavy_low_rep_set(self):
        # 40 × 1.0 × 0.75 × 1.2
        assert pcr_depletion(reps=5, rpe=10.0, set_duration_seconds=45.0) == pytest.approx(36.0)

    def test_high_rep_easy_set_costs_less(self):
        assert pcr_depletion(reps=15, rpe=6.0, set_duration_seconds=60.0) < pcr_depletion(5, 10.0, 60.0)

    def test_one_half_life_restores_half_the_deficit(self):
        assert recover_pcr(64.0, 180.0) == pytest.approx(82.0)

    def test_no_rest_no_recovery(self):
        assert recover_pcr(64.0, 0.0) == 64.0


# ======================================================================
# Glycogen
# ======================================================================


class TestGlycogen:
    def test_hypertrophy_range_depletion(self):
        # 3.5 × 1.2 × 1.0 × 1.0 per set
        assert glycogen_depletion(reps=10, sets=3, rpe=10.0, set_duration_seconds=60.0) == pytest.approx(12.6)

    def test_rpe_six_uses_no_glycogen(self):
        assert glycogen_depletion(reps=10, sets=3, rpe=6.0, set_duration_seconds=60.0) == 0.0

    @pytest.mark.parametrize(
        "hours, expected",
        [
            (0.0, 0.0),
            (1.0, 5.0),
            (13.0, 45.0),
            (24.0, 80.0),
            (48.0, 100.0),
        ],
    )
    def test_three_phase_resynthesis(self, hours, expected):
        assert recover_glycogen(0.0, hours, nutrition_quality=1.0) == pytest.approx(expected)

    def test_poor_nutrition_slows_resynthesis(self):
        assert recover_glycogen(0.0, 24.0, 0.5) < recover_glycogen(0.0, 24.0, 1.0)

    def test_full_store_stays_full(self):
        assert recover_glycogen(100.0, 10.0) == 100.0


# ======================================================================
# IMTG
# ======================================================================


class TestIMTG:
    def test_depletion(self):
        assert imtg_depletion(set_duration_seconds=60.0, sets=3) == pytest.approx(4.5)

    def test_linear_refill(self):
        assert recover_imtg(64.0, 9.0) == pytest.approx(82.0)
        assert recover_imtg(64.0, 18.0) == pytest.approx(100.0)
        assert recover_imtg(64.0, 40.0) == pytest.approx(100.0)


# ======================================================================
# Workouts
# ======================================================================


class TestWorkouts:
    def test_grouped_by_gap(self):
        history = [_make_observation(hours_ago=2), _make_observation(hours_ago=10), _make_observation(hours_ago=9)]
        workouts = group_workouts(history)
        assert [len(w) for w in workouts] == [2, 1]
        assert workouts[0][0].timestamp == NOW - datetime.timedelta(hours=10)

    def test_session_depletion_includes_intra_rest_recovery(self):
        depletion = compute_session_depletion([_make_observation()], MuscleId.CHEST)
        # 100 → 64 → rest 180 s → 82 → 46
        assert depletion.final_pcr == pytest.approx(46.0)
        assert depletion.pcr_depletion == pytest.approx(54.0)
        assert depletion.glycogen_depletion == pytest.approx(3.15)
        assert depletion.imtg_depletion == pytest.approx(2.25)

    def test_session_depletion_scaled_by_involvement(self):
        chest = compute_session_depletion([_make_observation()], MuscleId.CHEST)
        lats = compute_session_depletion([_make_observation()], MuscleId.LATS)
        assert lats.glycogen_depletion == pytest.approx(chest.glycogen_depletion * 0.3)

    def test_untargeted_muscle_untouched(self):
        depletion = compute_session_depletion([_make_observation()], MuscleId.QUADS)
        assert depletion.pcr_depletion == 0.0
        assert depletion.final_pcr == 100.0


# ======================================================================
# History
# ======================================================================


class TestEnergyState:
    def test_just_finished_workout(self):
        workouts = group_workouts([_make_observation()])
        state = build_energy_state(workouts, MuscleId.CHEST, NOW)
        assert state.pcr == pytest.approx(46.0)
        assert state.glycogen == pytest.approx(96.85)
        assert state.imtg == pytest.approx(97.75)
        assert state.last_workout_at == NOW
        assert state.replenished_at is None

    def test_replenishment_projected_when_glycogen_low(self):
        heavy_volume = _make_observation(sets=10, reps=20, duration=60.0)
        state = build_energy_state(group_workouts([heavy_volume]), MuscleId.CHEST, NOW)
        assert state.glycogen == pytest.approx(47.5)
        expected = NOW + datetime.timedelta(hours=52.5 / 100.0 * 36.0)
        assert abs((state.replenished_at - expected).total_seconds()) < 1e-3

    def test_stores_recover_over_time(self):
        workouts = group_workouts([_make_observation(hours_ago=48)])
        state = build_energy_state(workouts, MuscleId.CHEST, NOW)
        assert state.pcr == pytest.approx(100.0)
        assert state.glycogen == pytest.approx(100.0)
        assert state.imtg == pytest.approx(100.0)

    def test_states_cover_targeted_muscles_only(self):
        states = build_energy_states([_make_observation()], NOW)
        assert set(states) == {MuscleId.CHEST, MuscleId.FRONT_DELTS, MuscleId.TRICEPS, MuscleId.LATS}

    def test_future_observations_ignored(self):
        assert build_energy_states([_make_observation(hours_ago=-1)], NOW) == {}


# ======================================================================
# Recommendations
# ======================================================================


class TestEnergyRecommendations:
    def test_fresh_muscle(self):
        recs = energy_recommendations(_make_state())
        assert recs.can_train_heavy
        assert recs.can_train_volume
        assert recs.warnings == []

    def test_depleted_muscle(self):
        recs = energy_recommendations(_make_state(pcr=50.0, glycogen=40.0, imtg=50.0))
        assert not recs.can_train_heavy
        assert not recs.can_train_volume
        assert recs.warnings == ["pcr_low", "glycogen_depleted", "imtg_low"]

    def test_moderate_glycogen(self):
        recs = energy_recommendations(_make_state(glycogen=60.0))
        assert recs.warnings == ["glycogen_moderate"]
        assert recs.can_train_heavy
