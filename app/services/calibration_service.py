"""
Calibration service.

Applies closed-loop observations (direct half-lives, subjective ratings,
performance ratios) to a user's Bayesian recovery parameters.

A batch is a read-modify-write over every parameter it touches, so it is
serialized per user: one lock per ``user_id`` is held from the read to
the final commit.  Different users calibrate concurrently.
"""

import datetime
import threading
import weakref

from fastapi import HTTPException, status
from loguru import logger
from sqlmodel import Session

from app.db.repositories.recovery import RecoveryParameterRepository
from app.models.recovery import UserRecoveryParameter
from app.recovery.calibration import apply_batch, batch_observations, summarize
from app.schemas.calibration import (
    CalibrationBatch,
    CalibrationBatchResult,
    CalibrationSummary,
    RecoveryParameter,
)

# Entries vanish once no caller holds the lock.
_user_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_user_locks_guard = threading.Lock()


def _lock_for(user_id: int) -> threading.Lock:
    with _user_locks_guard:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = _user_locks[user_id] = threading.Lock()
        return lock


class CalibrationService:
    """Service for per-user parameter calibration."""

    def __init__(self, session: Session):
        self.repository = RecoveryParameterRepository(session)

    def apply(self, user_id: int, batch: CalibrationBatch) -> CalibrationBatchResult:
        """Incorporate every observation in *batch*, in order.

        Raises:
            HTTPException: 422 when an observation is rejected by the model.
        """
        now = datetime.datetime.utcnow()
        with _lock_for(user_id):
            records = {r.parameter_name: r for r in self.repository.get_by_user(user_id)}
            current = {name: RecoveryParameter.model_validate(r) for name, r in records.items()}

            try:
                updated, updates = apply_batch(current, batch_observations(batch), now=now)
            except ValueError as e:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=str(e),
                )

            changed = []
            for name in dict.fromkeys(u.parameter_name for u in updates):
                record = records.get(name) or UserRecoveryParameter(user_id=user_id, parameter_name=name)
                self._apply_to_record(record, updated[name])
                changed.append(record)
            self.repository.save_many(changed)

        anomalies = sum(1 for u in updates if u.anomalous)
        logger.info(
            f"[CALIBRATION] Batch applied user_id={user_id} observations={len(updates)} "
            f"parameters={len(changed)} anomalies={anomalies}"
        )
        return CalibrationBatchResult(updates=updates, summary=summarize(updated.values()))

    def get_parameters(self, user_id: int) -> list[RecoveryParameter]:
        return [RecoveryParameter.model_validate(r) for r in self.repository.get_by_user(user_id)]

    def summary(self, user_id: int) -> CalibrationSummary:
        parameters = self.get_parameters(user_id)
        if not parameters:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No calibration data for user",
            )
        return summarize(parameters)

    @staticmethod
    def _apply_to_record(record: UserRecoveryParameter, parameter: RecoveryParameter) -> None:
        record.population_mean = parameter.population_mean
        record.population_std = parameter.population_std
        record.user_mean = parameter.user_mean
        record.user_std = parameter.user_std
        record.observation_count = parameter.observation_count
        record.confidence = parameter.confidence.value
        record.state = parameter.state.value
        record.last_updated = parameter.last_updated
