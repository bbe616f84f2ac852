"""
Shared API dependencies.

Reusable FastAPI dependencies for request-scoped values.  Database
sessions come from :func:`app.db.session.get_db`.
"""

from fastapi import Path


def get_user_id(user_id: int = Path(..., ge=1, description="Owner of the recovery data")) -> int:
    """Validated ``user_id`` path parameter shared by every per-user route."""
    return user_id
