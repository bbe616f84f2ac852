"""
Recovery context database models.

Daily lifestyle data is stored flat (one row per user and date, every
column nullable) the same way it arrives from the API.  Demographics is
one row per user; cycle records are one row per user and date.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class DailyContext(SQLModel, table=True):
    """Sleep, nutrition and stress for one user on one day."""

    __tablename__ = "daily_context"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_context_user_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    date: datetime.date = Field(nullable=False, index=True)

    # Sleep
    sleep_hours: Optional[float] = Field(default=None)
    sleep_quality: Optional[str] = Field(default=None, max_length=20)
    sleep_interruptions: Optional[int] = Field(default=None)

    # Nutrition
    protein_g_per_kg: Optional[float] = Field(default=None)
    carbs_g_per_kg: Optional[float] = Field(default=None)
    calorie_balance: Optional[str] = Field(default=None, max_length=20)
    hydration: Optional[str] = Field(default=None, max_length=20)
    meal_timing: Optional[str] = Field(default=None, max_length=20)

    # Stress
    perceived_stress: Optional[float] = Field(default=None)
    work_stress: Optional[float] = Field(default=None)
    life_stress: Optional[float] = Field(default=None)
    resting_heart_rate: Optional[int] = Field(default=None)
    hrv_ms: Optional[float] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class UserDemographics(SQLModel, table=True):
    """Slow-changing personal data that scales recovery capacity."""

    __tablename__ = "user_demographics"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, unique=True, index=True)
    age: int = Field(default=30, nullable=False)
    sex: str = Field(default="male", nullable=False, max_length=10)
    training_age_years: float = Field(default=1.0, nullable=False)
    experience: str = Field(default="intermediate", nullable=False, max_length=20)
    active_injuries: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    chronic_conditions: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    body_weight_kg: Optional[float] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class MenstrualCycle(SQLModel, table=True):
    """Cycle phase reported for one day."""

    __tablename__ = "menstrual_cycles"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_menstrual_cycle_user_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    date: datetime.date = Field(nullable=False, index=True)
    phase: str = Field(default="unknown", nullable=False, max_length=20)
    day_in_cycle: Optional[int] = Field(default=None)
    symptoms: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    hormonal_contraception: bool = Field(default=False, nullable=False)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
