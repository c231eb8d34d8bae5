"""Database engine, session factory and request-scoped sessions.

The engine is built once by the application lifespan and stored on
``app.state``; nothing here holds a module-level connection pool.
"""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from stockflow.core.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Create the engine with pooling suited to the configured backend."""
    connect_args = {}

    if settings.is_sqlite:
        connect_args = {"check_same_thread": False}
        # SQLite doesn't support connection pooling the same way
        pool_config = {
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }
    else:
        pool_config = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": settings.db_pool_recycle,
        }

    engine = create_engine(
        settings.database_url,
        connect_args=connect_args,
        echo=settings.debug and settings.log_level == "DEBUG",
        **pool_config,
    )

    if settings.is_sqlite:
        enable_sqlite_foreign_keys(engine)

    return engine


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Enable foreign key enforcement for SQLite connections."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get database session dependency from the application's factory."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Explicit unit of work: commit on success, roll back and re-raise on error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


# Type alias for dependency injection
DbSession = Annotated[Session, Depends(get_db)]
