"""Database base configuration and session management."""

import logging
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from actas.core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with connection resilience settings."""
    kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_recycle=300,  # Recycle connections after 5 minutes
            pool_timeout=30,  # Timeout to get connection from pool
            pool_size=5,
            max_overflow=10,
            connect_args={"connect_timeout": 10},
        )

    return create_engine(database_url, **kwargs)


settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.debug)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get database session with automatic cleanup."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables."""
    # Register models on Base.metadata
    from actas.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
