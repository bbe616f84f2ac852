"""
Recovery context service.

Stores daily lifestyle data, demographics and menstrual-cycle records,
and assembles them into the :class:`ContextBundle` the recovery engine
consumes.  Daily data is flat in the database and grouped into sleep,
nutrition and stress records here.
"""

import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.config import settings
from app.db.repositories.context import (
    DailyContextRepository,
    DemographicsRepository,
    MenstrualCycleRepository,
)
from app.models.context import DailyContext, MenstrualCycle, UserDemographics
from app.schemas.context import (
    ContextBundle,
    DailyContextResponse,
    DailyContextUpsert,
    Demographics,
    MenstrualCycleRecord,
    NutritionRecord,
    SleepRecord,
    StressRecord,
)

_NUTRITION_FIELDS = ("protein_g_per_kg", "carbs_g_per_kg", "calorie_balance", "hydration", "meal_timing")
_STRESS_FIELDS = ("perceived_stress", "work_stress", "life_stress", "resting_heart_rate", "hrv_ms")


def _present(entry: DailyContext, fields: tuple[str, ...]) -> dict:
    """Subset of *fields* that are set on *entry*."""
    return {f: getattr(entry, f) for f in fields if getattr(entry, f) is not None}


class ContextService:
    """Service for recovery context business logic."""

    def __init__(self, session: Session):
        self.daily = DailyContextRepository(session)
        self.demographics = DemographicsRepository(session)
        self.cycles = MenstrualCycleRepository(session)

    # ------------------------------------------------------------------
    # Daily context
    # ------------------------------------------------------------------

    def upsert_daily(
        self, user_id: int, date: datetime.date, data: DailyContextUpsert,
    ) -> tuple[DailyContextResponse, bool]:
        """Create or merge the daily entry for *date*.

        Returns:
            Tuple of (response, created) where created is True if new entry.
        """
        values = data.model_dump(exclude_none=True, mode="json")
        existing = self.daily.get_by_user_and_date(user_id, date)

        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            existing.updated_at = datetime.datetime.utcnow()
            return DailyContextResponse.model_validate(self.daily.update(existing)), False

        entry = self.daily.create(DailyContext(user_id=user_id, date=date, **values))
        return DailyContextResponse.model_validate(entry), True

    def get_daily(self, user_id: int, date: datetime.date) -> DailyContextResponse:
        entry = self.daily.get_by_user_and_date(user_id, date)
        if not entry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No context entry for {date}",
            )
        return DailyContextResponse.model_validate(entry)

    # ------------------------------------------------------------------
    # Demographics and cycle
    # ------------------------------------------------------------------

    def upsert_demographics(self, user_id: int, data: Demographics) -> tuple[Demographics, bool]:
        values = data.model_dump(mode="json")
        entry = self.demographics.get_by_user(user_id)
        created = entry is None
        if created:
            entry = UserDemographics(user_id=user_id, **values)
        else:
            for key, value in values.items():
                setattr(entry, key, value)
            entry.updated_at = datetime.datetime.utcnow()
        return self._to_demographics(self.demographics.save(entry)), created

    def get_demographics(self, user_id: int) -> Demographics:
        entry = self.demographics.get_by_user(user_id)
        if not entry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No demographics recorded",
            )
        return self._to_demographics(entry)

    def upsert_cycle(self, user_id: int, data: MenstrualCycleRecord) -> tuple[MenstrualCycleRecord, bool]:
        values = data.model_dump(mode="json", exclude={"date"})
        entry = self.cycles.get_by_user_and_date(user_id, data.date)
        created = entry is None
        if created:
            entry = MenstrualCycle(user_id=user_id, date=data.date, **values)
        else:
            for key, value in values.items():
                setattr(entry, key, value)
        return self._to_cycle(self.cycles.save(entry)), created

    # ------------------------------------------------------------------
    # Bundle
    # ------------------------------------------------------------------

    def build_bundle(
        self, user_id: int, today: datetime.date, days: Optional[int] = None,
    ) -> ContextBundle:
        """Context for the *days* ending on *today* (inclusive).

        Sleep keeps every day that has hours recorded; nutrition and
        stress use the most recent day that has any of their fields.
        """
        days = days or settings.CONTEXT_DAYS
        start = today - datetime.timedelta(days=days - 1)
        entries = self.daily.get_by_user_date_range(user_id, start, today)

        sleep = [
            SleepRecord(
                date=e.date,
                hours=e.sleep_hours,
                **{k: v for k, v in (("quality", e.sleep_quality), ("interruptions", e.sleep_interruptions))
                   if v is not None},
            )
            for e in entries
            if e.sleep_hours is not None
        ]

        nutrition = None
        stress = None
        for entry in reversed(entries):
            if nutrition is None and _present(entry, _NUTRITION_FIELDS):
                nutrition = NutritionRecord(date=entry.date, **_present(entry, _NUTRITION_FIELDS))
            if stress is None and _present(entry, _STRESS_FIELDS):
                stress = StressRecord(date=entry.date, **_present(entry, _STRESS_FIELDS))

        demographics = self.demographics.get_by_user(user_id)
        cycle = self.cycles.get_latest_by_user(user_id, today)
        if cycle is not None and cycle.date < start:
            cycle = None

        return ContextBundle(
            sleep=sleep,
            nutrition=nutrition,
            stress=stress,
            demographics=self._to_demographics(demographics) if demographics else None,
            cycle=self._to_cycle(cycle) if cycle else None,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_demographics(entry: UserDemographics) -> Demographics:
        return Demographics(
            age=entry.age,
            sex=entry.sex,
            training_age_years=entry.training_age_years,
            experience=entry.experience,
            active_injuries=list(entry.active_injuries or []),
            chronic_conditions=list(entry.chronic_conditions or []),
            body_weight_kg=entry.body_weight_kg,
        )

    @staticmethod
    def _to_cycle(entry: MenstrualCycle) -> MenstrualCycleRecord:
        return MenstrualCycleRecord(
            date=entry.date,
            phase=entry.phase,
            day_in_cycle=entry.day_in_cycle,
            symptoms=list(entry.symptoms or []),
            hormonal_contraception=entry.hormonal_contraception,
        )
