"""
Recovery assessment endpoint.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.api.dependencies import get_user_id
from app.db.session import get_db
from app.schemas.assessment import RecoveryAssessment
from app.services.recovery_service import RecoveryService

router = APIRouter()


@router.get("", summary="Current recovery and injury-risk assessment.", response_model=RecoveryAssessment, )
async def get_recovery(at: Optional[datetime.datetime] = Query(None, description="Reference time (UTC); defaults to now"),
                       user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    """
    Always answers: when the live computation fails or times out the
    response is the last snapshot (within its TTL) or a neutral default,
    flagged with ``is_fallback`` and a warning.
    """
    service = RecoveryService(db)
    return await service.get_assessment(user_id, at)
