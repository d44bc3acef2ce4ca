"""Alembic migration runner for the TaskForge schema.

The target database comes from DATABASE_URL and DATABASE_SSLMODE, read
through the API settings. alembic.ini only carries logging config.
"""

from logging.config import fileConfig

from sqlalchemy import pool
from sqlmodel import SQLModel, create_engine

from alembic import context

# Registers the users and tasks tables on SQLModel.metadata
from taskforge.models import Task, User  # noqa: F401
from taskforge.config import get_settings
from taskforge.db.session import normalize_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata

settings = get_settings()
database_url = normalize_database_url(settings.DATABASE_URL)


def _connect_args() -> dict[str, str]:
    # sslmode is a libpq option; only pass it when configured
    if settings.DATABASE_SSLMODE:
        return {"sslmode": settings.DATABASE_SSLMODE}
    return {}


def run_migrations_offline() -> None:
    """Emit the migration SQL as a script instead of executing it."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single short-lived connection."""
    engine = create_engine(
        database_url,
        poolclass=pool.NullPool,
        connect_args=_connect_args(),
    )

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
