"""
Training observation repository.

Handles database operations for :class:`TrainingObservationRecord`.
Observations are append-only, so there is no update method.
"""

import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.observation import TrainingObservationRecord


class TrainingObservationRepository:
    """Repository for TrainingObservationRecord database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: TrainingObservationRecord) -> TrainingObservationRecord:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def create_many(self, entries: list[TrainingObservationRecord]) -> list[TrainingObservationRecord]:
        """Insert a batch of observations in a single transaction."""
        self.session.add_all(entries)
        self.session.commit()
        for entry in entries:
            self.session.refresh(entry)
        return entries

    def get_by_id(self, entry_id: int) -> Optional[TrainingObservationRecord]:
        return self.session.get(TrainingObservationRecord, entry_id)

    def get_by_user_time_range(
        self, user_id: int, start: datetime.datetime, end: datetime.datetime,
    ) -> list[TrainingObservationRecord]:
        """Observations for a user with ``start <= timestamp <= end``, oldest first."""
        statement = (
            select(TrainingObservationRecord)
            .where(
                TrainingObservationRecord.user_id == user_id,
                TrainingObservationRecord.timestamp >= start,
                TrainingObservationRecord.timestamp <= end,
            )
            .order_by(TrainingObservationRecord.timestamp, TrainingObservationRecord.id)
        )
        return list(self.session.exec(statement).all())

    def count_by_user(self, user_id: int) -> int:
        statement = (
            select(func.count())
            .select_from(TrainingObservationRecord)
            .where(TrainingObservationRecord.user_id == user_id)
        )
        return self.session.exec(statement).first() or 0

    def delete(self, entry_id: int) -> bool:
        entry = self.get_by_id(entry_id)
        if entry:
            self.session.delete(entry)
            self.session.commit()
            return True
        return False
