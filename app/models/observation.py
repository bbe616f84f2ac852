"""
Training observation database model.

One row per logged exercise entry.  Rows are append-only: the recovery
engine rebuilds every state from this table, so an observation is never
edited after it is recorded.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class TrainingObservationRecord(SQLModel, table=True):
    """A single completed exercise (sets × reps at a load and RPE)."""

    __tablename__ = "training_observations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    timestamp: datetime.datetime = Field(nullable=False, index=True)
    exercise_name: str = Field(nullable=False, max_length=100, index=True)

    sets: int = Field(nullable=False)
    reps: int = Field(nullable=False)
    weight: float = Field(default=0.0, nullable=False)
    rpe: float = Field(nullable=False)
    set_duration_seconds: float = Field(default=45.0, nullable=False)
    rest_interval_seconds: float = Field(default=120.0, nullable=False)
    is_eccentric: bool = Field(default=False, nullable=False)
    is_ballistic: bool = Field(default=False, nullable=False)

    # Summed initial muscle fatigue at ingestion (None for unknown exercises)
    initial_fatigue: Optional[float] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
