"""
Recovery persistence models.

``UserRecoveryParameter`` holds the Bayesian posterior of one calibrated
parameter per user.  ``RecoverySnapshot`` stores the last computed
assessment as JSON so it can be served when a live computation fails.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class UserRecoveryParameter(SQLModel, table=True):
    """Population prior plus user posterior for one parameter."""

    __tablename__ = "user_recovery_parameters"
    __table_args__ = (UniqueConstraint("user_id", "parameter_name", name="uq_recovery_parameter_user_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    parameter_name: str = Field(nullable=False, max_length=100)

    population_mean: float = Field(nullable=False)
    population_std: float = Field(nullable=False)
    user_mean: float = Field(nullable=False)
    user_std: float = Field(nullable=False)
    observation_count: int = Field(default=0, nullable=False)
    confidence: str = Field(default="very_low", nullable=False, max_length=20)
    state: str = Field(default="population_only", nullable=False, max_length=20)
    last_updated: Optional[datetime.datetime] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class RecoverySnapshot(SQLModel, table=True):
    """Last-known-good assessment for one user."""

    __tablename__ = "recovery_snapshots"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    computed_at: datetime.datetime = Field(nullable=False, index=True)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
