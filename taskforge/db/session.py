"""Database engine and session management."""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from taskforge.config import get_settings


def normalize_database_url(url: str) -> str:
    """Point bare postgresql:// URLs at the psycopg v3 driver."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str, sslmode: str = "", echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite is accepted for local runs and tests; in-memory SQLite shares a
    single connection so every session sees the same database.
    """
    url = normalize_database_url(url)

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"sslmode": sslmode} if sslmode else {},
    )


@lru_cache
def get_engine() -> Engine:
    """Get the process-wide engine, created on first use."""
    settings = get_settings()
    if not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required")
    return build_engine(
        settings.DATABASE_URL,
        sslmode=settings.DATABASE_SSLMODE,
        echo=settings.SQL_ECHO,
    )


def get_session() -> Generator[Session, None, None]:
    """Get database session with automatic cleanup."""
    with Session(get_engine()) as session:
        yield session
