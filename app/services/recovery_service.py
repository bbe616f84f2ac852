"""
Recovery assessment service.

Fetches a user's observations, context and calibrated parameters through
a :class:`RecoveryDataSource`, runs the recovery engine and stores the
result as the user's last-known-good snapshot.

Failure handling:
    The fetch and the computation run together under a single
    ``asyncio.wait_for`` timeout.  On timeout or any data-source error the
    service serves the most recent snapshot still inside its TTL,
    otherwise a neutral assessment.  Neither case is raised to the
    caller.
"""

import asyncio
import datetime
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import settings
from app.db.repositories.recovery import RecoveryParameterRepository, RecoverySnapshotRepository
from app.models.recovery import RecoverySnapshot
from app.recovery.assessment import AssessmentContext, compute_recovery_assessment, neutral_assessment
from app.recovery.calibration import half_life_overrides
from app.schemas.assessment import RecoveryAssessment
from app.schemas.calibration import RecoveryParameter
from app.schemas.context import ContextBundle
from app.schemas.observation import TrainingObservation, as_naive_utc
from app.services.context_service import ContextService
from app.services.observation_service import ObservationService

WARNING_TIMEOUT = "assessment_timeout"
WARNING_DATA_SOURCE = "data_source_unavailable"
WARNING_CACHED = "served_cached_snapshot"


# ======================================================================
# Data source boundary
# ======================================================================


class RecoveryDataSource(ABC):
    """Everything the engine needs about one user, from wherever it lives."""

    @abstractmethod
    def fetch_observations(self, user_id: int, now: datetime.datetime, days: int) -> list[TrainingObservation]:
        """Observations in the *days* before *now*."""

    @abstractmethod
    def fetch_context(self, user_id: int, today: datetime.date, days: int) -> ContextBundle:
        """Context bundle for the *days* ending on *today*."""

    @abstractmethod
    def fetch_parameters(self, user_id: int) -> list[RecoveryParameter]:
        """Calibrated recovery parameters."""


class SqlRecoveryDataSource(RecoveryDataSource):
    """Data source backed by the application database."""

    def __init__(self, session: Session):
        self.observations = ObservationService(session)
        self.context = ContextService(session)
        self.parameters = RecoveryParameterRepository(session)

    def fetch_observations(self, user_id: int, now: datetime.datetime, days: int) -> list[TrainingObservation]:
        return self.observations.get_window(user_id, now, days)

    def fetch_context(self, user_id: int, today: datetime.date, days: int) -> ContextBundle:
        return self.context.build_bundle(user_id, today, days)

    def fetch_parameters(self, user_id: int) -> list[RecoveryParameter]:
        return [RecoveryParameter.model_validate(p) for p in self.parameters.get_by_user(user_id)]


# ======================================================================
# Service
# ======================================================================


class DataSourceError(Exception):
    """A :class:`RecoveryDataSource` failed to deliver the engine inputs."""


class RecoveryService:
    """Service for recovery assessment business logic."""

    def __init__(self, session: Session, data_source: Optional[RecoveryDataSource] = None):
        self.session = session
        self.data_source = data_source
        self.snapshots = RecoverySnapshotRepository(session)

    def compute(self, user_id: int, now: datetime.datetime) -> RecoveryAssessment:
        """Fetch inputs and run the engine synchronously.

        Without an injected data source the fetch opens its own session on
        the request's engine: this runs in a worker thread that can outlive
        the request after a timeout.
        """
        if self.data_source is not None:
            return self._compute_from(self.data_source, user_id, now)
        with Session(self.session.get_bind()) as session:
            return self._compute_from(SqlRecoveryDataSource(session), user_id, now)

    def _compute_from(
        self, source: RecoveryDataSource, user_id: int, now: datetime.datetime,
    ) -> RecoveryAssessment:
        try:
            observations = source.fetch_observations(user_id, now, settings.LOOKBACK_DAYS)
            bundle = source.fetch_context(user_id, now.date(), settings.CONTEXT_DAYS)
            parameters = source.fetch_parameters(user_id)
        except Exception as e:
            raise DataSourceError(f"{type(e).__name__}: {e}") from e

        context = AssessmentContext(half_lives=half_life_overrides(parameters))
        return compute_recovery_assessment(
            observations,
            now,
            bundle,
            context,
            user_id=user_id,
            parallel=settings.PARALLEL_BUILDERS,
        )

    async def get_assessment(
        self, user_id: int, now: Optional[datetime.datetime] = None,
    ) -> RecoveryAssessment:
        """Live assessment, degrading to a cached snapshot or the neutral default."""
        now = as_naive_utc(now) if now else datetime.datetime.utcnow()
        cached = self._cached_or_none(user_id, now)

        try:
            assessment = await asyncio.wait_for(
                asyncio.to_thread(self.compute, user_id, now),
                timeout=settings.ASSESSMENT_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[RECOVERY] Assessment timed out after {settings.ASSESSMENT_TIMEOUT_SECONDS}s user_id={user_id}"
            )
            return self._fallback(user_id, now, WARNING_TIMEOUT, cached)
        except DataSourceError:
            logger.exception(f"[RECOVERY] Data source failure user_id={user_id}")
            return self._fallback(user_id, now, WARNING_DATA_SOURCE, cached)

        self._store_snapshot(user_id, assessment)
        return assessment

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def cached(self, user_id: int, now: datetime.datetime) -> Optional[RecoveryAssessment]:
        """Latest snapshot computed within the TTL before *now*, if any."""
        now = as_naive_utc(now)
        snapshot = self.snapshots.get_latest(user_id)
        if snapshot is None:
            return None
        age = now - snapshot.computed_at
        if age < datetime.timedelta(0) or age > datetime.timedelta(minutes=settings.SNAPSHOT_TTL_MINUTES):
            return None
        return RecoveryAssessment.model_validate(snapshot.payload)

    def _store_snapshot(self, user_id: int, assessment: RecoveryAssessment) -> None:
        try:
            self.snapshots.create(RecoverySnapshot(
                user_id=user_id,
                computed_at=assessment.computed_at,
                payload=assessment.model_dump(mode="json"),
            ))
            cutoff = assessment.computed_at - datetime.timedelta(minutes=settings.SNAPSHOT_TTL_MINUTES)
            self.snapshots.delete_older_than(user_id, cutoff)
        except SQLAlchemyError as e:
            logger.warning(f"[RECOVERY] Snapshot not stored user_id={user_id}: {e}")

    def _cached_or_none(self, user_id: int, now: datetime.datetime) -> Optional[RecoveryAssessment]:
        try:
            return self.cached(user_id, now)
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"[RECOVERY] Snapshot lookup failed user_id={user_id}: {e}")
            return None

    @staticmethod
    def _fallback(
        user_id: int,
        now: datetime.datetime,
        warning: str,
        cached: Optional[RecoveryAssessment],
    ) -> RecoveryAssessment:
        if cached is not None:
            logger.info(f"[RECOVERY] Serving cached snapshot user_id={user_id}")
            return cached.model_copy(update={
                "is_fallback": True,
                "warnings": [*cached.warnings, warning, WARNING_CACHED],
            })

        logger.warning(f"[RECOVERY] Serving neutral assessment user_id={user_id} reason={warning}")
        return neutral_assessment(user_id, now, warning)
