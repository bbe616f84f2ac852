"""
Database initialization.

Creates all tables directly from the SQLModel metadata.  Production
databases are migrated with Alembic instead.
"""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

import app.db.base  # noqa: F401


def init_db(engine: Engine | None = None) -> None:
    """Create every table that does not exist yet."""
    if engine is None:
        from app.db.session import engine

    logger.info(f"Creating database tables on {engine.url.render_as_string(hide_password=True)}")
    SQLModel.metadata.create_all(engine)
    logger.info(f"Tables ready: {', '.join(sorted(SQLModel.metadata.tables))}")


if __name__ == "__main__":
    init_db()
