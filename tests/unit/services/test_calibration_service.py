"""Tests for CalibrationService persistence and serialization."""

import gc
import threading

import pytest
from fastapi import HTTPException

from app.schemas.calibration import (
    CalibrationBatch,
    CalibrationState,
    HalfLifeObservation,
    SubjectiveRecoveryRating,
)
from app.services.calibration_service import CalibrationService, _lock_for, _user_locks


def _observe(entity: str, half_life: float) -> HalfLifeObservation:
    return HalfLifeObservation(entity=entity, observed_half_life=half_life, confidence=1.0)


class TestApply:
    def test_creates_parameters(self, session):
        service = CalibrationService(session)
        result = service.apply(1, CalibrationBatch(half_lives=[_observe("Chest", 60.0)]))

        assert len(result.updates) == 1
        assert result.updates[0].posterior_mean == pytest.approx(54.0)
        assert result.summary.total_parameters == 1

        (param,) = service.get_parameters(1)
        assert param.parameter_name == "Chest_halfLife"
        assert param.user_mean == pytest.approx(54.0)
        assert param.state == CalibrationState.CALIBRATING

    def test_updates_existing_parameters(self, session):
        service = CalibrationService(session)
        service.apply(1, CalibrationBatch(half_lives=[_observe("Chest", 60.0)]))
        result = service.apply(1, CalibrationBatch(half_lives=[_observe("Chest", 60.0)]))

        assert result.updates[0].prior_mean == pytest.approx(54.0)
        params = service.get_parameters(1)
        assert len(params) == 1
        assert params[0].observation_count == 2

    def test_mixed_batch(self, session):
        batch = CalibrationBatch(
            half_lives=[_observe("Chest", 50.0)],
            subjective=[SubjectiveRecoveryRating(entity="Quads", hours_since_training=72.0, recovery_rating=50.0)],
        )
        result = CalibrationService(session).apply(1, batch)
        assert [u.parameter_name for u in result.updates] == ["Chest_halfLife", "Quads_halfLife"]
        assert result.summary.calibrated_parameters == 2

    def test_users_are_isolated(self, session):
        service = CalibrationService(session)
        service.apply(1, CalibrationBatch(half_lives=[_observe("Chest", 60.0)]))
        assert service.get_parameters(2) == []


class TestSummary:
    def test_not_found_without_parameters(self, session):
        with pytest.raises(HTTPException) as exc:
            CalibrationService(session).summary(1)
        assert exc.value.status_code == 404

    def test_summary_after_batch(self, session):
        service = CalibrationService(session)
        service.apply(1, CalibrationBatch(half_lives=[_observe("Chest", 60.0), _observe("Lats", 50.0)]))
        summary = service.summary(1)
        assert summary.total_parameters == 2
        assert summary.total_observations == 2


class TestUserLocks:
    def test_same_user_same_lock(self):
        assert _lock_for(101) is _lock_for(101)

    def test_different_users_different_locks(self):
        assert _lock_for(101) is not _lock_for(102)

    def test_lock_is_a_mutex(self):
        assert isinstance(_lock_for(103), type(threading.Lock()))

    def test_released_locks_are_dropped(self):
        lock = _lock_for(104)
        assert 104 in _user_locks
        del lock
        gc.collect()
        assert 104 not in _user_locks

    def test_held_lock_shared_between_callers(self):
        held = _lock_for(105)
        with held:
            assert _lock_for(105) is held
