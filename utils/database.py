"""
Database utilities and engine management.

This module provides the core database engine that can be used by any layer:
- API routes
- Services
- Celery tasks
- Repositories
- Scripts

No dependencies on higher-level modules (api, services).
"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session

from config.settings import settings


@lru_cache()
def get_engine() -> Engine:
    """
    Get cached database engine.

    Returns:
        SQLAlchemy engine singleton

    Raises:
        RuntimeError: If DATABASE_URL is not configured

    Note:
        Uses psycopg (v3) driver for PostgreSQL URLs. Any other URL
        (e.g. sqlite for local runs) is passed through unchanged.
    """
    db_url = settings.DATABASE_URL
    if not db_url:
        raise RuntimeError("DATABASE_URL is not configured")

    if not db_url.startswith(("postgresql://", "postgresql+psycopg://")):
        return create_engine(db_url, pool_pre_ping=True)

    # Convert postgresql:// to postgresql+psycopg:// for psycopg3 driver
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)

    engine = create_engine(
        db_url,
        connect_args={
            "prepare_threshold": None,  # Disable prepared statements for pooler compatibility
            "connect_timeout": 10,
        },
        pool_pre_ping=True,  # Verify connection before use
        pool_recycle=300,
        pool_size=5,
        max_overflow=5,
        pool_timeout=30,
    )

    @event.listens_for(engine, "connect")
    def set_statement_timeout(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("SET statement_timeout = '15000'")
        cursor.close()

    return engine


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Yields:
        SQLModel Session that auto-closes after request

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...
    """
    engine = get_engine()
    with Session(engine) as session:
        yield session


def session_factory() -> Session:
    """Open a new session on the shared engine (caller closes it)."""
    return Session(get_engine())
