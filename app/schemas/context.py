"""
Contextual recovery schemas.

Daily lifestyle signals (sleep, nutrition, stress), a demographics
record and an optional menstrual-cycle record.  Each is converted into a
multiplicative recovery-capacity factor by
:mod:`app.recovery.context`.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Categorical values
# ---------------------------------------------------------------------------

class SleepQuality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class CalorieBalance(str, Enum):
    DEFICIT = "deficit"
    MAINTENANCE = "maintenance"
    SURPLUS = "surplus"


class HydrationLevel(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class MealTiming(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"


class CyclePhase(str, Enum):
    MENSTRUATION = "menstruation"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Daily records
# ---------------------------------------------------------------------------

class SleepRecord(BaseModel):
    date: datetime.date
    hours: float = Field(..., ge=0.0, le=24.0)
    quality: SleepQuality = SleepQuality.FAIR
    interruptions: int = Field(0, ge=0, le=50)


class NutritionRecord(BaseModel):
    date: datetime.date
    protein_g_per_kg: float = Field(1.6, ge=0.0, le=6.0)
    carbs_g_per_kg: float = Field(3.0, ge=0.0, le=15.0)
    calorie_balance: CalorieBalance = CalorieBalance.MAINTENANCE
    hydration: HydrationLevel = HydrationLevel.GOOD
    meal_timing: MealTiming = MealTiming.FAIR


class StressRecord(BaseModel):
    date: datetime.date
    perceived_stress: float = Field(5.0, ge=1.0, le=10.0)
    work_stress: float = Field(5.0, ge=1.0, le=10.0)
    life_stress: float = Field(5.0, ge=1.0, le=10.0)
    resting_heart_rate: Optional[int] = Field(None, ge=25, le=150)
    hrv_ms: Optional[float] = Field(None, ge=1.0, le=300.0)


class Demographics(BaseModel):
    age: int = Field(30, ge=10, le=100)
    sex: Sex = Sex.MALE
    training_age_years: float = Field(1.0, ge=0.0, le=80.0)
    experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    active_injuries: list[str] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)
    body_weight_kg: Optional[float] = Field(None, gt=0.0, le=400.0)


class MenstrualCycleRecord(BaseModel):
    date: datetime.date
    phase: CyclePhase = CyclePhase.UNKNOWN
    day_in_cycle: Optional[int] = Field(None, ge=1, le=60)
    symptoms: list[str] = Field(default_factory=list)
    hormonal_contraception: bool = False


class ContextBundle(BaseModel):
    """Everything the context calculator consumes for one user.

    ``nutrition`` and ``stress`` are the most recent daily records;
    ``sleep`` holds every record in the context window.
    """

    sleep: list[SleepRecord] = Field(default_factory=list)
    nutrition: Optional[NutritionRecord] = None
    stress: Optional[StressRecord] = None
    demographics: Optional[Demographics] = None
    cycle: Optional[MenstrualCycleRecord] = None


# ---------------------------------------------------------------------------
# Daily context API payload
# ---------------------------------------------------------------------------

class DailyContextUpsert(BaseModel):
    """One day of lifestyle data; every group is optional."""

    sleep_hours: Optional[float] = Field(None, ge=0.0, le=24.0)
    sleep_quality: Optional[SleepQuality] = None
    sleep_interruptions: Optional[int] = Field(None, ge=0, le=50)
    protein_g_per_kg: Optional[float] = Field(None, ge=0.0, le=6.0)
    carbs_g_per_kg: Optional[float] = Field(None, ge=0.0, le=15.0)
    calorie_balance: Optional[CalorieBalance] = None
    hydration: Optional[HydrationLevel] = None
    meal_timing: Optional[MealTiming] = None
    perceived_stress: Optional[float] = Field(None, ge=1.0, le=10.0)
    work_stress: Optional[float] = Field(None, ge=1.0, le=10.0)
    life_stress: Optional[float] = Field(None, ge=1.0, le=10.0)
    resting_heart_rate: Optional[int] = Field(None, ge=25, le=150)
    hrv_ms: Optional[float] = Field(None, ge=1.0, le=300.0)


class DailyContextResponse(DailyContextUpsert):
    id: int
    user_id: int
    date: datetime.date

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class LimitingFactor(BaseModel):
    """A context factor below 0.9 that is holding recovery back."""

    factor: str = Field(..., description="Machine-readable factor id, e.g. 'sleep'")
    modifier: float
    recommendation: str = Field(..., description="Machine-readable recommendation id")


class ContextModifiers(BaseModel):
    """Multiplicative recovery-capacity factors (1.0 = neutral)."""

    sleep: float = 1.0
    nutrition: float = 1.0
    stress: float = 1.0
    training_age: float = 1.0
    cycle: float = 1.0
    overall: float = Field(1.0, ge=0.4, le=1.4)
    limiting_factors: list[LimitingFactor] = Field(default_factory=list)
