"""
Training observation service.

Validates and stores training observations.  Each stored row carries the
summed initial muscle fatigue the entry produced, so clients can see the
cost of a session without computing a full assessment.
"""

import datetime

from fastapi import HTTPException, status
from loguru import logger
from sqlmodel import Session

from app.catalog.exercises import get_exercise
from app.db.repositories.observation import TrainingObservationRepository
from app.models.observation import TrainingObservationRecord
from app.recovery.fatigue import compute_initial_fatigue
from app.schemas.observation import (
    TrainingObservation,
    TrainingObservationCreate,
    TrainingObservationResponse,
    as_naive_utc,
)


class ObservationService:
    """Service for training observation business logic."""

    def __init__(self, session: Session):
        self.repository = TrainingObservationRepository(session)

    def record(self, user_id: int, data: TrainingObservationCreate) -> TrainingObservationResponse:
        entry = self.repository.create(self._to_record(user_id, data))
        logger.info(
            f"[INGEST] Observation stored user_id={user_id} exercise='{entry.exercise_name}' "
            f"initial_fatigue={entry.initial_fatigue}"
        )
        return self._to_response(entry)

    def record_many(
        self, user_id: int, data: list[TrainingObservationCreate],
    ) -> list[TrainingObservationResponse]:
        """Store a whole session (several exercises) in one transaction."""
        if not data:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="At least one observation is required",
            )
        entries = self.repository.create_many([self._to_record(user_id, d) for d in data])
        logger.info(f"[INGEST] {len(entries)} observations stored user_id={user_id}")
        return [self._to_response(e) for e in entries]

    def get_by_id(self, user_id: int, entry_id: int) -> TrainingObservationResponse:
        entry = self.repository.get_by_id(entry_id)
        if not entry or entry.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Observation not found",
            )
        return self._to_response(entry)

    def get_range(
        self, user_id: int, start: datetime.datetime, end: datetime.datetime,
    ) -> list[TrainingObservationResponse]:
        start, end = as_naive_utc(start), as_naive_utc(end)
        entries = self.repository.get_by_user_time_range(user_id, start, end)
        return [self._to_response(e) for e in entries]

    def get_window(
        self, user_id: int, now: datetime.datetime, days: int,
    ) -> list[TrainingObservation]:
        """Engine-ready observations from the last *days* up to *now*."""
        now = as_naive_utc(now)
        entries = self.repository.get_by_user_time_range(user_id, now - datetime.timedelta(days=days), now)
        return [TrainingObservation.model_validate(e) for e in entries]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _initial_fatigue(data: TrainingObservationCreate) -> float | None:
        """Summed involvement-weighted fatigue, or None for unknown exercises."""
        exercise = get_exercise(data.exercise_name)
        if exercise is None:
            logger.warning(f"[INGEST] Unknown exercise '{data.exercise_name}', stored without initial fatigue")
            return None
        observation = TrainingObservation(**data.model_dump())
        total = sum(
            compute_initial_fatigue(observation, exercise, inv.muscle) * inv.percentage / 100.0
            for inv in exercise.involvement
        )
        return round(total, 2)

    def _to_record(self, user_id: int, data: TrainingObservationCreate) -> TrainingObservationRecord:
        return TrainingObservationRecord(
            user_id=user_id,
            initial_fatigue=self._initial_fatigue(data),
            **data.model_dump(),
        )

    @staticmethod
    def _to_response(entry: TrainingObservationRecord) -> TrainingObservationResponse:
        return TrainingObservationResponse.model_validate(entry)
