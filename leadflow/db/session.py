"""
leadflow/db/session.py - SQLAlchemy engine and session factory.

Usage:
    from leadflow.db.session import get_db

    # As a FastAPI dependency:
    def my_route(db: Session = Depends(get_db)):
        ...

    # In scripts and background tasks:
    with get_session() as db:
        ...
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from leadflow.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (tests, local dev) uses a single-connection pool that rejects sizing args
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,       # reconnect on stale connections
        "pool_size": 5,
        "max_overflow": 10,
    }


engine = create_engine(
    settings.database_url,
    echo=False,                      # set True to log all SQL (useful for debugging)
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a DB session and ensures it's closed."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Context manager for use in scripts and background tasks (non-FastAPI code)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
