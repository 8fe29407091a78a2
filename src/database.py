"""Database configuration and session management."""

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from src.config import get_settings
from src.services.exceptions import StorageError

logger = logging.getLogger(__name__)

settings = get_settings()


def build_connect_args(database_url: str) -> dict:
    """Driver-level options that bound how long a connection or statement may take."""
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    if database_url.startswith("postgresql"):
        return {
            "connect_timeout": settings.database_pool_timeout,
            "options": f"-c statement_timeout={settings.database_statement_timeout_ms}",
        }
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=build_connect_args(settings.database_url),
    pool_pre_ping=True,
    pool_timeout=settings.database_pool_timeout,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session) -> None:
    """Commit the session, rolling back and raising StorageError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database commit failed: {e}")
        raise StorageError("Failed to persist changes") from e

