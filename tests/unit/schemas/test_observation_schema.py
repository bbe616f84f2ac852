"""Tests for observation validation at the ingestion boundary."""

import datetime

import pytest
from pydantic import ValidationError

from app.schemas.observation import (
    TrainingObservation,
    TrainingObservationCreate,
    effective_volume_multiplier,
)

NOW = datetime.datetime(2026, 3, 1, 12, 0)


def _payload(**overrides) -> dict:
    payload = {
        "timestamp": NOW,
        "exercise_name": "Barbell Bench Press",
        "sets": 3,
        "reps": 8,
        "weight": 80.0,
        "rpe": 8.0,
    }
    payload.update(overrides)
    return payload


class TestEffectiveVolume:
    @pytest.mark.parametrize(
        "rpe, expected",
        [
            (10.0, 1.0),
            (9.0, 1.0),
            (8.0, 0.7),
            (6.5, 0.4),
            (5.0, 0.1),
        ],
    )
    def test_multiplier(self, rpe, expected):
        assert effective_volume_multiplier(rpe) == expected

    def test_computed_volume(self):
        obs = TrainingObservation(**_payload())
        assert obs.volume == 1920.0
        assert obs.effective_volume == pytest.approx(1344.0)


class TestValidation:
    def test_defaults(self):
        obs = TrainingObservationCreate(**_payload())
        assert obs.set_duration_seconds == 45.0
        assert obs.rest_interval_seconds == 120.0
        assert not obs.is_eccentric
        assert not obs.is_ballistic

    def test_name_stripped(self):
        assert TrainingObservationCreate(**_payload(exercise_name="  Pull-Up ")).exercise_name == "Pull-Up"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"exercise_name": "  "},
            {"sets": 0},
            {"reps": 0},
            {"weight": -5.0},
            {"rpe": 5.9},
            {"rpe": 10.5},
            {"set_duration_seconds": 0.0},
            {"rest_interval_seconds": -1.0},
        ],
    )
    def test_rejected(self, overrides):
        with pytest.raises(ValidationError):
            TrainingObservationCreate(**_payload(**overrides))

    def test_aware_timestamp_stored_as_naive_utc(self):
        plus_two = datetime.timezone(datetime.timedelta(hours=2))
        obs = TrainingObservationCreate(**_payload(timestamp=datetime.datetime(2026, 3, 1, 14, 0, tzinfo=plus_two)))
        assert obs.timestamp == NOW
        assert obs.timestamp.tzinfo is None

    def test_naive_timestamp_taken_as_utc(self):
        assert TrainingObservationCreate(**_payload()).timestamp == NOW

    def test_engine_observation_is_immutable(self):
        obs = TrainingObservation(**_payload())
        with pytest.raises(ValidationError):
            obs.rpe = 9.0
