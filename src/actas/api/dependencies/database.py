"""Database session dependency."""

from typing import Generator

from sqlalchemy.orm import Session

from actas.infrastructure.database.base import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Yield a database session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
