"""Database session management with connection pooling"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pension_gateway.config import Settings, get_settings
from pension_gateway.infrastructure.database.models import Base


def build_engine(settings: Settings) -> Engine:
    """Create an engine for the configured database"""
    if settings.database_url.startswith("sqlite"):
        # Ingestion workers write from several threads
        return create_engine(settings.database_url, connect_args={"check_same_thread": False})

    # Connection pool: recycle to avoid stale connections
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


def build_session_factory(settings: Settings) -> sessionmaker:
    """Create the schema if needed and return a session factory bound to it"""
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Process-wide session factory built from environment settings"""
    return build_session_factory(get_settings())


def get_db() -> Generator[Session, None, None]:
    """Dependency injection for database sessions"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
