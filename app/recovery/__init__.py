"""Recovery engine — decay models, state builders, calibration, injury risk."""

from app.recovery.assessment import AssessmentContext, compute_recovery_assessment, neutral_assessment

__all__ = ["AssessmentContext", "compute_recovery_assessment", "neutral_assessment"]
