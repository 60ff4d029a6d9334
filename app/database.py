"""
Database engine, session factory and declarative base

The quiz/result store is optional: without DATABASE_URL no engine is
created and `get_db` yields None so routes can answer 503 / empty lists.
"""
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True) if settings.DATABASE_URL else None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine) if engine is not None else None


def init_db() -> None:
    """Create tables if the store is configured"""
    if engine is None:
        logger.warning("DATABASE_URL not set; quiz and result storage disabled")
        return

    # Import models so they register on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Iterator[Optional[Session]]:
    """FastAPI dependency yielding a session, or None when unconfigured"""
    if SessionLocal is None:
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
