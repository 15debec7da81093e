"""SQLite database operations.

Handles database connection and session management.
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .models import Base

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on SQLite foreign key enforcement for each new connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Database connection and session manager."""

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[float] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ``:memory:``. If None,
                     uses LIBRARYLOANS_DB_PATH env var or default location.
            busy_timeout: Seconds a writer waits on a locked database file.
        """
        config = get_config()
        if db_path is None:
            db_path = str(config.db_path)
        if busy_timeout is None:
            busy_timeout = config.busy_timeout

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False, "timeout": busy_timeout},
            )
        event.listen(self.engine, "connect", _enable_foreign_keys)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

        # A single shared connection cannot interleave transactions
        self._session_lock = threading.RLock() if self._is_memory else None

    @property
    def is_memory(self) -> bool:
        return self._is_memory

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        # Import models to register them with Base
        from ..membership.models import User  # noqa: F401
        from ..ledger.models import Loan  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.debug("Tables ready in %s", self.db_path)

    def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def table_names(self) -> list[str]:
        """Names of the tables present in the database."""
        return sorted(inspect(self.engine).get_table_names())

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Commits when the block exits normally and rolls back on any
        exception, which is then re-raised.
        """
        with self._session_lock or nullcontext():
            session = self.SessionLocal()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    if _db is not None:
        _db.engine.dispose()
    _db = None
