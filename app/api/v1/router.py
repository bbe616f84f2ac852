"""
API v1 router.

Aggregates all v1 endpoints.  Every resource is scoped to a user.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import calibration, context, observations, recovery

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    observations.router,
    prefix="/users/{user_id}/observations",
    tags=["Training observations"],
)
api_router.include_router(
    context.router, prefix="/users/{user_id}", tags=["Recovery context"]
)
api_router.include_router(
    recovery.router, prefix="/users/{user_id}/recovery", tags=["Recovery"]
)
api_router.include_router(
    calibration.router, prefix="/users/{user_id}/calibration", tags=["Calibration"]
)
