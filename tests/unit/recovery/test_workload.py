"""Tests for the scalar acute:chronic workload ratio.

Volumes here are ``sets × reps × weight``; every helper observation is
1 × 10 × 100 = 1000 unless stated otherwise.
"""

import datetime

import pytest

from app.recovery.workload import DEFAULT_ACWR_CONFIG, ACWRConfig, _label_acwr, compute_acwr
from app.schemas.observation import TrainingObservation
from app.schemas.workload import WorkloadZone

NOW = datetime.datetime(2026, 3, 1, 12, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_observation(days_ago: float, weight: float = 100.0) -> TrainingObservation:
    return TrainingObservation(
        timestamp=NOW - datetime.timedelta(days=days_ago),
        exercise_name="Back Squat",
        sets=1,
        reps=10,
        weight=weight,
        rpe=8.0,
    )


def _weekly(*days_ago: float) -> list[TrainingObservation]:
    return [_make_observation(d) for d in days_ago]


# ======================================================================
# ACWRConfig
# ======================================================================


class TestACWRConfig:
    def test_default_values(self):
        assert DEFAULT_ACWR_CONFIG.acute_days == 7
        assert DEFAULT_ACWR_CONFIG.chronic_days == 28
        assert DEFAULT_ACWR_CONFIG.chronic_weeks == 4.0

    def test_chronic_weeks_property(self):
        assert ACWRConfig(chronic_days=21).chronic_weeks == 3.0

    def test_rejects_short_acute_window(self):
        with pytest.raises(ValueError):
            ACWRConfig(acute_days=1)


# ======================================================================
# Zones
# ======================================================================


class TestLabelACWR:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.0, WorkloadZone.DETRAINING),
            (0.79, WorkloadZone.DETRAINING),
            (0.8, WorkloadZone.OPTIMAL),
            (1.29, WorkloadZone.OPTIMAL),
            (1.3, WorkloadZone.CAUTION),
            (1.5, WorkloadZone.DANGER),
            (3.0, WorkloadZone.DANGER),
        ],
    )
    def test_zones(self, value, expected):
        assert _label_acwr(value) == expected


# ======================================================================
# compute_acwr
# ======================================================================


class TestComputeACWR:
    def test_steady_training(self):
        result = compute_acwr(_weekly(1, 8, 15, 22), NOW)
        assert result.acute_load == 1000.0
        assert result.chronic_load == 1000.0
        assert result.ratio == 1.0
        assert result.zone == WorkloadZone.OPTIMAL
        assert result.has_history

    def test_spike(self):
        result = compute_acwr(_weekly(1, 2, 3, 8, 15, 22), NOW)
        assert result.acute_load == 3000.0
        assert result.chronic_load == 1500.0
        assert result.ratio == 2.0
        assert result.zone == WorkloadZone.DANGER

    def test_acute_window_is_half_open(self):
        result = compute_acwr(_weekly(7), NOW)
        assert result.acute_load == 0.0
        assert result.chronic_load == 250.0
        assert result.zone == WorkloadZone.DETRAINING

    def test_only_recent_training(self):
        result = compute_acwr(_weekly(1), NOW)
        assert result.ratio == 4.0

    def test_old_and_future_entries_ignored(self):
        result = compute_acwr(_weekly(40, -1), NOW)
        assert result.acute_load == 0.0
        assert result.chronic_load == 0.0

    def test_empty_history(self):
        result = compute_acwr([], NOW)
        assert result.ratio == 0.0
        assert not result.has_history
        assert result.zone == WorkloadZone.DETRAINING

    def test_custom_windows(self):
        config = ACWRConfig(acute_days=7, chronic_days=14)
        result = compute_acwr(_weekly(1, 8), NOW, config)
        assert result.chronic_load == 1000.0
        assert result.ratio == 1.0
