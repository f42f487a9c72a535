"""Database session management for the reservation engine."""

from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings


def _connect_args(url: str) -> Dict[str, Any]:
    # SQLite connections are shared across FastAPI's worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def create_engine(
    url: str = settings.database_url,
    echo: bool = settings.database_echo,
    **kwargs: Any,
) -> Engine:
    """
    Create SQLAlchemy engine.

    Args:
        url: Database URL
        echo: Whether to log all SQL statements
        **kwargs: Extra engine options (e.g. poolclass)

    Returns:
        SQLAlchemy engine
    """
    return sa_create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=_connect_args(url),
        **kwargs,
    )


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


# Global engine instance
engine: Engine = create_engine()

# Session factory
SessionLocal = create_session_factory(engine)


def get_session() -> Generator[Session, None, None]:
    """
    Dependency for getting a database session.

    Yields:
        Session instance

    Example:
        def my_view(session: Session = Depends(get_session)):
            # use session
            pass
    """
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database by creating all tables."""
    from .base import Base
    from . import models_sqlalchemy  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def close_db() -> None:
    """Close database engine and all connections."""
    engine.dispose()
