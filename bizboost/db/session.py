from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bizboost.core.errors import DirectoryError, StorageIOError
from bizboost.db.base import Base

import bizboost.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


def _make_engine(database_url: str, *, busy_timeout: float) -> Engine:
    connect_args = {}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": busy_timeout}
    engine = create_engine(database_url, echo=False, future=True, connect_args=connect_args)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class EntityStore:
    """Durable keyed storage for businesses, reviews, deals and favorites.

    One instance per process: created at startup, ``dispose()``-d at exit.
    Every unit of work goes through ``session()``, which commits on success and
    rolls back on any error so a failed call never leaves partial rows behind.
    """

    def __init__(self, database_url: str, *, busy_timeout: float = 30.0) -> None:
        self.database_url = database_url
        self.engine = _make_engine(database_url, busy_timeout=busy_timeout)
        self._sessionmaker = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
        )

    def create_all(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.exception("Schema creation failed")
            raise StorageIOError(f"Could not initialise storage: {exc}") from exc

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self._sessionmaker()
        try:
            yield db
            db.commit()
        except DirectoryError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage error, transaction rolled back")
            raise StorageIOError(f"Storage operation failed: {exc.__class__.__name__}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
