"""Database session management with connection pooling"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from rahnu_gateway.config import settings


def build_engine(database_url: str) -> Engine:
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


_engine = None
_session_factory = None


def get_session_factory() -> sessionmaker:
    """Create the engine lazily so the in-memory backend never opens a connection"""
    global _engine, _session_factory
    if _session_factory is None:
        _engine = build_engine(settings.database_url)
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _session_factory


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create missing tables"""
    from rahnu_gateway.infrastructure.database.models import Base

    get_session_factory()
    Base.metadata.create_all(bind=_engine)
