"""
Training observation endpoints.

Observations are append-only: record a session, list a time range,
fetch one entry.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.dependencies import get_user_id
from app.core.config import settings
from app.db.session import get_db
from app.schemas.observation import TrainingObservationCreate, TrainingObservationResponse
from app.services.observation_service import ObservationService

router = APIRouter()


@router.post("", summary="Record the exercises of a training session.", response_model=list[TrainingObservationResponse],
             status_code=status.HTTP_201_CREATED, )
def record_observations(data: list[TrainingObservationCreate], user_id: int = Depends(get_user_id),
                        db: Session = Depends(get_db), ):
    service = ObservationService(db)
    return service.record_many(user_id, data)


@router.get("", summary="List observations in a time range.", response_model=list[TrainingObservationResponse], )
def list_observations(start: Optional[datetime.datetime] = Query(None, description="Range start (inclusive)"),
                      end: Optional[datetime.datetime] = Query(None, description="Range end (inclusive)"),
                      user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    """Defaults to the lookback window ending now."""
    end = end or datetime.datetime.utcnow()
    start = start or end - datetime.timedelta(days=settings.LOOKBACK_DAYS)
    service = ObservationService(db)
    return service.get_range(user_id, start, end)


@router.get("/{observation_id}", summary="Get one observation.", response_model=TrainingObservationResponse, )
def get_observation(observation_id: int, user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = ObservationService(db)
    return service.get_by_id(user_id, observation_id)
