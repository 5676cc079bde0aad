"""Database engine, per-request sessions and transaction scope"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from agrocredit.config import settings
from agrocredit.domain.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine; server databases get a bounded pool, SQLite a thread-shareable connection"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block, or nothing.

    Store connectivity errors surface as DependencyFailure; every other
    exception is re-raised unchanged after rollback.
    """
    try:
        yield db
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error("Record store unavailable: %s", e)
        raise DependencyFailure("Record store unavailable") from e
    except Exception:
        db.rollback()
        raise
