"""Tests for ObservationService against an in-memory database."""

import datetime

import pytest
from fastapi import HTTPException

from app.schemas.observation import TrainingObservation, TrainingObservationCreate
from app.services.observation_service import ObservationService

NOW = datetime.datetime(2026, 3, 1, 12, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_create(
    exercise: str = "Barbell Bench Press",
    hours_ago: float = 1.0,
    rpe: float = 10.0,
) -> TrainingObservationCreate:
    return TrainingObservationCreate(
        timestamp=NOW - datetime.timedelta(hours=hours_ago),
        exercise_name=exercise,
        sets=5,
        reps=5,
        weight=100.0,
        rpe=rpe,
    )


# ======================================================================
# Recording
# ======================================================================


class TestRecord:
    def test_record_stores_initial_fatigue(self, session):
        service = ObservationService(session)
        result = service.record(1, _make_create())
        assert result.id is not None
        assert result.user_id == 1
        # Chest 30 + Front Delts 26.25 + Triceps 36 + Lats 9
        assert result.initial_fatigue == pytest.approx(101.25)
        assert result.volume == 2500.0

    def test_unknown_exercise_stored_without_fatigue(self, session):
        result = ObservationService(session).record(1, _make_create(exercise="Mystery Move"))
        assert result.initial_fatigue is None
        assert result.exercise_name == "Mystery Move"

    def test_record_many(self, session):
        service = ObservationService(session)
        results = service.record_many(1, [_make_create(), _make_create("Pull-Up")])
        assert len(results) == 2
        assert all(r.id is not None for r in results)

    def test_record_many_empty_rejected(self, session):
        with pytest.raises(HTTPException) as exc:
            ObservationService(session).record_many(1, [])
        assert exc.value.status_code == 422


# ======================================================================
# Reading
# ======================================================================


class TestRead:
    def test_get_by_id(self, session):
        service = ObservationService(session)
        created = service.record(1, _make_create())
        assert service.get_by_id(1, created.id).exercise_name == "Barbell Bench Press"

    def test_other_users_entry_not_found(self, session):
        service = ObservationService(session)
        created = service.record(1, _make_create())
        with pytest.raises(HTTPException) as exc:
            service.get_by_id(2, created.id)
        assert exc.value.status_code == 404

    def test_range_is_ordered_and_scoped(self, session):
        service = ObservationService(session)
        service.record(1, _make_create(hours_ago=2))
        service.record(1, _make_create(hours_ago=30))
        service.record(2, _make_create(hours_ago=2))
        entries = service.get_range(1, NOW - datetime.timedelta(days=2), NOW)
        assert len(entries) == 2
        assert entries[0].timestamp < entries[1].timestamp

    def test_window_returns_engine_observations(self, session):
        service = ObservationService(session)
        service.record(1, _make_create(hours_ago=2))
        service.record(1, _make_create(hours_ago=24 * 100))
        window = service.get_window(1, NOW, 90)
        assert len(window) == 1
        assert isinstance(window[0], TrainingObservation)
        assert window[0].rpe == 10.0
