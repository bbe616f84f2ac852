"""
Recovery context endpoints.

Daily lifestyle data (date-based upsert), demographics and
menstrual-cycle records.
"""

import datetime

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.api.dependencies import get_user_id
from app.db.session import get_db
from app.schemas.context import DailyContextResponse, DailyContextUpsert, Demographics, MenstrualCycleRecord
from app.services.context_service import ContextService

router = APIRouter()


@router.put("/context/{date}", summary="Create or update context for a date.", response_model=DailyContextResponse, )
def upsert_daily_context(date: datetime.date, data: DailyContextUpsert, response: Response,
                         user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    """Upsert: creates the entry if it doesn't exist, merges non-null fields if it does."""
    service = ContextService(db)
    entry, created = service.upsert_daily(user_id, date, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return entry


@router.get("/context/{date}", summary="Get context for a specific date.", response_model=DailyContextResponse, )
def get_daily_context(date: datetime.date, user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = ContextService(db)
    return service.get_daily(user_id, date)


@router.put("/demographics", summary="Create or replace demographics.", response_model=Demographics, )
def upsert_demographics(data: Demographics, response: Response, user_id: int = Depends(get_user_id),
                        db: Session = Depends(get_db), ):
    service = ContextService(db)
    entry, created = service.upsert_demographics(user_id, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return entry


@router.get("/demographics", summary="Get demographics.", response_model=Demographics, )
def get_demographics(user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = ContextService(db)
    return service.get_demographics(user_id)


@router.put("/cycle", summary="Create or update a menstrual-cycle record.", response_model=MenstrualCycleRecord, )
def upsert_cycle(data: MenstrualCycleRecord, response: Response, user_id: int = Depends(get_user_id),
                 db: Session = Depends(get_db), ):
    service = ContextService(db)
    entry, created = service.upsert_cycle(user_id, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return entry
