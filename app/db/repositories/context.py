"""
Recovery context repositories.

Handles database operations for :class:`DailyContext`,
:class:`UserDemographics` and :class:`MenstrualCycle`.
"""

import datetime
from typing import Optional

from sqlmodel import Session, select

from app.models.context import DailyContext, MenstrualCycle, UserDemographics


class DailyContextRepository:
    """Repository for DailyContext database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: DailyContext) -> DailyContext:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_by_user_and_date(self, user_id: int, date: datetime.date) -> Optional[DailyContext]:
        statement = select(DailyContext).where(
            DailyContext.user_id == user_id,
            DailyContext.date == date,
        )
        return self.session.exec(statement).first()

    def get_by_user_date_range(
        self, user_id: int, start: datetime.date, end: datetime.date,
    ) -> list[DailyContext]:
        """Get entries for a user within a date range (inclusive), oldest first."""
        statement = (
            select(DailyContext)
            .where(
                DailyContext.user_id == user_id,
                DailyContext.date >= start,
                DailyContext.date <= end,
            )
            .order_by(DailyContext.date)
        )
        return list(self.session.exec(statement).all())

    def update(self, entry: DailyContext) -> DailyContext:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry


class DemographicsRepository:
    """Repository for UserDemographics database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_user(self, user_id: int) -> Optional[UserDemographics]:
        statement = select(UserDemographics).where(UserDemographics.user_id == user_id)
        return self.session.exec(statement).first()

    def save(self, entry: UserDemographics) -> UserDemographics:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry


class MenstrualCycleRepository:
    """Repository for MenstrualCycle database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_user_and_date(self, user_id: int, date: datetime.date) -> Optional[MenstrualCycle]:
        statement = select(MenstrualCycle).where(
            MenstrualCycle.user_id == user_id,
            MenstrualCycle.date == date,
        )
        return self.session.exec(statement).first()

    def get_latest_by_user(self, user_id: int, on_or_before: datetime.date) -> Optional[MenstrualCycle]:
        """Most recent cycle record not later than ``on_or_before``."""
        statement = (
            select(MenstrualCycle)
            .where(
                MenstrualCycle.user_id == user_id,
                MenstrualCycle.date <= on_or_before,
            )
            .order_by(MenstrualCycle.date.desc())
            .limit(1)
        )
        return self.session.exec(statement).first()

    def save(self, entry: MenstrualCycle) -> MenstrualCycle:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry
