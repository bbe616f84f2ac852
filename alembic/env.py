"""
Alembic environment for the recovery engine schema.

Migrations cover the observation log (``training_observations``), the
context tables (``daily_context``, ``user_demographics``,
``menstrual_cycles``), calibrated parameters
(``user_recovery_parameters``) and cached assessments
(``recovery_snapshots``).  The URL comes from ``settings.DATABASE_URL``;
SQLite targets use batch mode so column changes can be migrated.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

from app.core.config import settings
# Registers every recovery table on SQLModel.metadata
from app.db.base import *  # noqa

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = SQLModel.metadata

# SQLite cannot ALTER most columns in place
_BATCH = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL for the configured URL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True,
                      dialect_opts={"paramstyle": "named"}, compare_type=True, render_as_batch=_BATCH, )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single unpooled connection."""
    connectable = engine_from_config(config.get_section(config.config_ini_section, {}), prefix="sqlalchemy.",
                                     poolclass=pool.NullPool, )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True,
                          render_as_batch=_BATCH, )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
