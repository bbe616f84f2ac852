"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from fastapi import FastAPI

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logger import setup_logger

setup_logger(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Muscle, connective-tissue and energy recovery with injury-risk assessment.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint - service info."""
    return {
        "message": "Recovery Engine API",
        "version": settings.VERSION,
        "authors": settings.AUTHORS,
        "project url": settings.PROJECT_URL,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "recovery-engine",
        "version": settings.VERSION
    }
