"""Tests for ContextService storage and bundle assembly."""

import datetime

import pytest
from fastapi import HTTPException

from app.schemas.context import (
    CalorieBalance,
    CyclePhase,
    DailyContextUpsert,
    Demographics,
    ExperienceLevel,
    MenstrualCycleRecord,
    Sex,
    SleepQuality,
)
from app.services.context_service import ContextService

TODAY = datetime.date(2026, 3, 1)


def _days_ago(n: int) -> datetime.date:
    return TODAY - datetime.timedelta(days=n)


# ======================================================================
# Daily context
# ======================================================================


class TestDailyContext:
    def test_create_then_merge(self, session):
        service = ContextService(session)
        first, created = service.upsert_daily(1, TODAY, DailyContextUpsert(sleep_hours=7.5))
        assert created
        assert first.sleep_hours == 7.5

        merged, created = service.upsert_daily(1, TODAY, DailyContextUpsert(perceived_stress=4.0))
        assert not created
        assert merged.id == first.id
        assert merged.sleep_hours == 7.5
        assert merged.perceived_stress == 4.0

    def test_enum_fields_round_trip(self, session):
        service = ContextService(session)
        service.upsert_daily(1, TODAY, DailyContextUpsert(sleep_hours=8, sleep_quality=SleepQuality.GOOD))
        assert service.get_daily(1, TODAY).sleep_quality == SleepQuality.GOOD

    def test_missing_day_not_found(self, session):
        with pytest.raises(HTTPException) as exc:
            ContextService(session).get_daily(1, TODAY)
        assert exc.value.status_code == 404


# ======================================================================
# Demographics and cycle
# ======================================================================


class TestDemographicsAndCycle:
    def test_demographics_upsert(self, session):
        service = ContextService(session)
        saved, created = service.upsert_demographics(1, Demographics(age=35, active_injuries=["knee"]))
        assert created
        assert saved.active_injuries == ["knee"]

        updated, created = service.upsert_demographics(1, Demographics(age=36, experience=ExperienceLevel.ADVANCED))
        assert not created
        assert updated.age == 36
        assert updated.active_injuries == []
        assert service.get_demographics(1).experience == ExperienceLevel.ADVANCED

    def test_demographics_not_found(self, session):
        with pytest.raises(HTTPException) as exc:
            ContextService(session).get_demographics(1)
        assert exc.value.status_code == 404

    def test_cycle_upsert(self, session):
        service = ContextService(session)
        record = MenstrualCycleRecord(date=TODAY, phase=CyclePhase.LUTEAL, symptoms=["severe_cramps"])
        saved, created = service.upsert_cycle(1, record)
        assert created
        assert saved.phase == CyclePhase.LUTEAL

        saved, created = service.upsert_cycle(1, record.model_copy(update={"phase": CyclePhase.MENSTRUATION}))
        assert not created
        assert saved.phase == CyclePhase.MENSTRUATION
        assert saved.symptoms == ["severe_cramps"]


# ======================================================================
# Bundle
# ======================================================================


class TestBuildBundle:
    def test_empty(self, session):
        bundle = ContextService(session).build_bundle(1, TODAY, 7)
        assert bundle.sleep == []
        assert bundle.nutrition is None
        assert bundle.stress is None
        assert bundle.demographics is None
        assert bundle.cycle is None

    def test_groups_daily_rows(self, session):
        service = ContextService(session)
        service.upsert_daily(1, _days_ago(2), DailyContextUpsert(
            sleep_hours=6.0, calorie_balance=CalorieBalance.DEFICIT, perceived_stress=8.0,
        ))
        service.upsert_daily(1, _days_ago(1), DailyContextUpsert(sleep_hours=8.0, protein_g_per_kg=2.0))
        service.upsert_daily(1, TODAY, DailyContextUpsert(hrv_ms=70.0))

        bundle = service.build_bundle(1, TODAY, 7)
        assert [s.hours for s in bundle.sleep] == [6.0, 8.0]
        assert bundle.nutrition.date == _days_ago(1)
        assert bundle.nutrition.protein_g_per_kg == 2.0
        assert bundle.nutrition.calorie_balance == CalorieBalance.MAINTENANCE
        assert bundle.stress.date == TODAY
        assert bundle.stress.hrv_ms == 70.0

    def test_window_excludes_old_days(self, session):
        service = ContextService(session)
        service.upsert_daily(1, _days_ago(7), DailyContextUpsert(sleep_hours=5.0))
        service.upsert_daily(1, _days_ago(6), DailyContextUpsert(sleep_hours=9.0))
        bundle = service.build_bundle(1, TODAY, 7)
        assert [s.hours for s in bundle.sleep] == [9.0]

    def test_demographics_and_recent_cycle_included(self, session):
        service = ContextService(session)
        service.upsert_demographics(1, Demographics(sex=Sex.FEMALE))
        service.upsert_cycle(1, MenstrualCycleRecord(date=_days_ago(2), phase=CyclePhase.FOLLICULAR))
        bundle = service.build_bundle(1, TODAY, 7)
        assert bundle.demographics.sex == Sex.FEMALE
        assert bundle.cycle.phase == CyclePhase.FOLLICULAR

    def test_stale_cycle_dropped(self, session):
        service = ContextService(session)
        service.upsert_cycle(1, MenstrualCycleRecord(date=_days_ago(20), phase=CyclePhase.LUTEAL))
        assert service.build_bundle(1, TODAY, 7).cycle is None
