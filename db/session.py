"""Database engine and session management for the front-of-house dashboard."""

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings


def create_engine(url: str = settings.database_url, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine.

    SQLite URLs get ``check_same_thread=False`` so the API's worker threads
    can share the file; other backends use a pre-pinged pool.
    """
    if url.startswith("sqlite"):
        return sa_create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return sa_create_engine(url, echo=echo, pool_pre_ping=True)


# Global engine instance
engine: Engine = create_engine(echo=settings.debug)

SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    autocommit=False,
    autoflush=False,
)


def init_db(bind: Engine = engine) -> None:
    """Initialize database by creating all tables."""
    from .base import Base
    from . import models_sqlalchemy  # noqa: F401  (register tables)

    Base.metadata.create_all(bind=bind)


def close_db() -> None:
    """Close database engine and all connections."""
    engine.dispose()
