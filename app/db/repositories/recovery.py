"""
Recovery parameter and snapshot repositories.
"""

import datetime
from typing import Optional

from sqlmodel import Session, select

from app.models.recovery import RecoverySnapshot, UserRecoveryParameter


class RecoveryParameterRepository:
    """Repository for UserRecoveryParameter database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_user(self, user_id: int) -> list[UserRecoveryParameter]:
        statement = (
            select(UserRecoveryParameter)
            .where(UserRecoveryParameter.user_id == user_id)
            .order_by(UserRecoveryParameter.parameter_name)
        )
        return list(self.session.exec(statement).all())

    def get_by_user_and_name(self, user_id: int, parameter_name: str) -> Optional[UserRecoveryParameter]:
        statement = select(UserRecoveryParameter).where(
            UserRecoveryParameter.user_id == user_id,
            UserRecoveryParameter.parameter_name == parameter_name,
        )
        return self.session.exec(statement).first()

    def save_many(self, entries: list[UserRecoveryParameter]) -> list[UserRecoveryParameter]:
        """Persist a batch of parameters in a single transaction."""
        self.session.add_all(entries)
        self.session.commit()
        for entry in entries:
            self.session.refresh(entry)
        return entries


class RecoverySnapshotRepository:
    """Repository for RecoverySnapshot database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: RecoverySnapshot) -> RecoverySnapshot:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_latest(self, user_id: int) -> Optional[RecoverySnapshot]:
        statement = (
            select(RecoverySnapshot)
            .where(RecoverySnapshot.user_id == user_id)
            .order_by(RecoverySnapshot.computed_at.desc())
            .limit(1)
        )
        return self.session.exec(statement).first()

    def delete_older_than(self, user_id: int, cutoff: datetime.datetime) -> int:
        """Drop snapshots computed before ``cutoff``; returns the number removed."""
        statement = select(RecoverySnapshot).where(
            RecoverySnapshot.user_id == user_id,
            RecoverySnapshot.computed_at < cutoff,
        )
        stale = list(self.session.exec(statement).all())
        for entry in stale:
            self.session.delete(entry)
        if stale:
            self.session.commit()
        return len(stale)
