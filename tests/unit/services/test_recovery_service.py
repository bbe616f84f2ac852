"""Tests for RecoveryService: live computation, snapshots and fallbacks."""

import asyncio
import datetime
import time

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from app.catalog.muscles import MuscleId
from app.core.config import settings
from app.models.recovery import RecoverySnapshot
from app.schemas.calibration import CalibrationBatch, HalfLifeObservation, RecoveryParameter
from app.schemas.context import ContextBundle, DailyContextUpsert
from app.schemas.observation import TrainingObservation, TrainingObservationCreate
from app.services import recovery_service
from app.services.calibration_service import CalibrationService
from app.services.context_service import ContextService
from app.services.observation_service import ObservationService
from app.services.recovery_service import (
    WARNING_CACHED,
    WARNING_DATA_SOURCE,
    WARNING_TIMEOUT,
    RecoveryDataSource,
    RecoveryService,
)

NOW = datetime.datetime(2026, 3, 1, 12, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_create(hours_ago: float = 1.0) -> TrainingObservationCreate:
    return TrainingObservationCreate(
        timestamp=NOW - datetime.timedelta(hours=hours_ago),
        exercise_name="Barbell Bench Press",
        sets=5,
        reps=5,
        weight=100.0,
        rpe=10.0,
    )


class _StaticSource(RecoveryDataSource):
    """Serves fixed inputs without touching the database."""

    def __init__(self, observations=None):
        self.observations = observations or []

    def fetch_observations(self, user_id, now, days):
        return self.observations

    def fetch_context(self, user_id, today, days):
        return ContextBundle()

    def fetch_parameters(self, user_id):
        return []


class _BrokenSource(_StaticSource):
    def fetch_observations(self, user_id, now, days):
        raise SQLAlchemyError("connection refused")


class _UnreachableSource(_StaticSource):
    def fetch_observations(self, user_id, now, days):
        raise ConnectionError("fetch failed")


class _MalformedSource(_StaticSource):
    def fetch_parameters(self, user_id):
        return [RecoveryParameter.model_validate({"parameter_name": "Chest_halfLife"})]


class _SlowSource(_StaticSource):
    def fetch_observations(self, user_id, now, days):
        time.sleep(0.5)
        return []


def _run(service: RecoveryService, now: datetime.datetime = NOW):
    return asyncio.run(service.get_assessment(1, now))


@pytest.fixture
def fast_timeout(monkeypatch):
    monkeypatch.setattr(settings, "ASSESSMENT_TIMEOUT_SECONDS", 0.05)


# ======================================================================
# Live computation
# ======================================================================


class TestLiveAssessment:
    def test_database_inputs(self, session):
        ObservationService(session).record(1, _make_create())
        ContextService(session).upsert_daily(1, NOW.date(), DailyContextUpsert(sleep_hours=8.0))

        result = _run(RecoveryService(session))
        assert not result.is_fallback
        assert result.user_id == 1
        assert result.muscles[MuscleId.CHEST].fatigue > 0
        assert len(result.context.limiting_factors) == 0

    def test_calibrated_half_life_applied(self, session):
        ObservationService(session).record(1, _make_create(hours_ago=24))
        baseline = _run(RecoveryService(session)).muscles[MuscleId.CHEST]

        batch = CalibrationBatch(half_lives=[HalfLifeObservation(entity="Chest", observed_half_life=24.0,
                                                                 confidence=1.0)])
        CalibrationService(session).apply(1, batch)
        calibrated = _run(RecoveryService(session)).muscles[MuscleId.CHEST]
        assert calibrated.half_life_hours < baseline.half_life_hours

    def test_snapshot_stored(self, session):
        service = RecoveryService(session, _StaticSource())
        _run(service)
        snapshot = service.snapshots.get_latest(1)
        assert snapshot is not None
        assert snapshot.computed_at == NOW

    def test_expired_snapshots_pruned(self, session):
        service = RecoveryService(session, _StaticSource())
        _run(service, NOW - datetime.timedelta(hours=2))
        _run(service, NOW)
        snapshots = session.exec(select(RecoverySnapshot)).all()
        assert [s.computed_at for s in snapshots] == [NOW]


# ======================================================================
# Fallbacks
# ======================================================================


class TestFallback:
    def test_data_source_failure_without_cache(self, session):
        result = _run(RecoveryService(session, _BrokenSource()))
        assert result.is_fallback
        assert result.warnings == [WARNING_DATA_SOURCE]
        assert result.overall_recovery == 50.0

    @pytest.mark.parametrize("source", [_UnreachableSource(), _MalformedSource()], ids=["connection", "validation"])
    def test_any_data_source_failure_degrades(self, session, source):
        result = _run(RecoveryService(session, source))
        assert result.is_fallback
        assert result.warnings == [WARNING_DATA_SOURCE]

    def test_non_sql_failure_serves_fresh_snapshot(self, session):
        _run(RecoveryService(session, _StaticSource()))
        result = _run(RecoveryService(session, _UnreachableSource()), NOW + datetime.timedelta(minutes=5))
        assert result.computed_at == NOW
        assert result.warnings[-2:] == [WARNING_DATA_SOURCE, WARNING_CACHED]

    def test_data_source_failure_serves_fresh_snapshot(self, session):
        observations = [TrainingObservation(**_make_create().model_dump())]
        _run(RecoveryService(session, _StaticSource(observations)))

        later = NOW + datetime.timedelta(minutes=10)
        result = _run(RecoveryService(session, _BrokenSource()), later)
        assert result.is_fallback
        assert result.computed_at == NOW
        assert MuscleId.CHEST in result.muscles
        assert result.warnings[-2:] == [WARNING_DATA_SOURCE, WARNING_CACHED]

    def test_expired_snapshot_not_served(self, session):
        _run(RecoveryService(session, _StaticSource()))
        later = NOW + datetime.timedelta(minutes=settings.SNAPSHOT_TTL_MINUTES + 1)
        result = _run(RecoveryService(session, _BrokenSource()), later)
        assert result.computed_at == later
        assert result.warnings == [WARNING_DATA_SOURCE]

    def test_timeout_serves_neutral(self, session, fast_timeout):
        result = _run(RecoveryService(session, _SlowSource()))
        assert result.is_fallback
        assert result.warnings == [WARNING_TIMEOUT]

    def test_timeout_serves_snapshot(self, session, fast_timeout):
        session.add(RecoverySnapshot(
            user_id=1,
            computed_at=NOW - datetime.timedelta(minutes=5),
            payload={
                "user_id": 1,
                "computed_at": (NOW - datetime.timedelta(minutes=5)).isoformat(),
                "overall_recovery": 80.0,
                "global_fatigue": 20.0,
                "injury_risk": {"score": 10.0, "level": "low"},
            },
        ))
        session.commit()

        result = _run(RecoveryService(session, _SlowSource()))
        assert result.is_fallback
        assert result.overall_recovery == 80.0
        assert result.warnings == [WARNING_TIMEOUT, WARNING_CACHED]


# ======================================================================
# Time zones and session isolation
# ======================================================================


class TestTimeZones:
    def test_aware_reference_time(self, session):
        ObservationService(session).record(1, _make_create())
        result = _run(RecoveryService(session), NOW.replace(tzinfo=datetime.timezone.utc))
        assert not result.is_fallback
        assert result.computed_at == NOW
        assert result.muscles[MuscleId.CHEST].fatigue > 0

    def test_offset_reference_time_converted_to_utc(self, session):
        ObservationService(session).record(1, _make_create())
        plus_two = datetime.timezone(datetime.timedelta(hours=2))
        result = _run(RecoveryService(session), datetime.datetime(2026, 3, 1, 14, 0, tzinfo=plus_two))
        assert result.computed_at == NOW

    def test_aware_time_reads_snapshot(self, session):
        _run(RecoveryService(session, _StaticSource()))
        later = (NOW + datetime.timedelta(minutes=5)).replace(tzinfo=datetime.timezone.utc)
        result = _run(RecoveryService(session, _BrokenSource()), later)
        assert result.computed_at == NOW
        assert result.warnings[-1] == WARNING_CACHED


class TestWorkerSession:
    def test_fetch_uses_dedicated_session(self, session, monkeypatch):
        seen = []

        class _RecordingSource(recovery_service.SqlRecoveryDataSource):
            def __init__(self, worker_session):
                seen.append(worker_session)
                super().__init__(worker_session)

        monkeypatch.setattr(recovery_service, "SqlRecoveryDataSource", _RecordingSource)
        ObservationService(session).record(1, _make_create())

        result = _run(RecoveryService(session))
        assert MuscleId.CHEST in result.muscles
        assert len(seen) == 1
        assert seen[0] is not session
        assert seen[0].get_bind() is session.get_bind()
