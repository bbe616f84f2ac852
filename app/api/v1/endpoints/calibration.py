"""
Calibration endpoints.

Closed-loop observations in, per-user parameter posteriors out.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.dependencies import get_user_id
from app.db.session import get_db
from app.schemas.calibration import CalibrationBatch, CalibrationBatchResult, CalibrationSummary, RecoveryParameter
from app.services.calibration_service import CalibrationService

router = APIRouter()


@router.post("/observations", summary="Apply a batch of calibration observations.",
             response_model=CalibrationBatchResult, )
def apply_calibration(batch: CalibrationBatch, user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = CalibrationService(db)
    return service.apply(user_id, batch)


@router.get("", summary="Calibration progress summary.", response_model=CalibrationSummary, )
def get_calibration_summary(user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = CalibrationService(db)
    return service.summary(user_id)


@router.get("/parameters", summary="All calibrated parameters.", response_model=list[RecoveryParameter], )
def list_parameters(user_id: int = Depends(get_user_id), db: Session = Depends(get_db), ):
    service = CalibrationService(db)
    return service.get_parameters(user_id)
