"""Pytest configuration and shared fixtures.

This module provides fixtures for testing libraryloans, including
temporary databases, managers and sample catalog data.
"""

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Generator

import pytest

from libraryloans.catalog import BookCreate, CatalogManager
from libraryloans.config import Config, reset_config
from libraryloans.db.sqlite import Database, reset_db
from libraryloans.ledger import LoanLedger
from libraryloans.membership import MembershipManager, UserCreate


PRAGMATIC_ISBN = "9780131103627"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch) -> Generator[None, None, None]:
    """Keep tests away from the user's real database and settings."""
    for name in list(os.environ):
        if name.startswith("LIBRARYLOANS_"):
            monkeypatch.delenv(name)
    reset_db()
    reset_config()
    yield
    reset_db()
    reset_config()


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def file_db(temp_db_path: Path) -> Generator[Database, None, None]:
    """Create a file-backed test database (needed for multi-threaded tests)."""
    database = Database(str(temp_db_path))
    database.create_tables()
    yield database
    database.engine.dispose()


@pytest.fixture
def db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture
def config() -> Config:
    """Default loan policy: 14-day period, no loan limit."""
    return Config(
        db_path=Path(":memory:"),
        busy_timeout=30.0,
        loan_period_days=14,
        max_active_loans=None,
        log_level="WARNING",
    )


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def catalog(db: Database) -> CatalogManager:
    return CatalogManager(db)


@pytest.fixture
def membership(db: Database) -> MembershipManager:
    return MembershipManager(db)


@pytest.fixture
def ledger(db: Database, config: Config) -> LoanLedger:
    return LoanLedger(db, config=config)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_book_data() -> BookCreate:
    """The catalog entry from the original schema walkthrough."""
    return BookCreate(
        id=PRAGMATIC_ISBN,
        title="The Pragmatic Programmer",
        author="Andrew Hunt",
        genre="Technology",
        published_year=1999,
        available=5,
    )


@pytest.fixture
def sample_book(catalog: CatalogManager, sample_book_data: BookCreate) -> str:
    """Add the sample book and return its id."""
    return catalog.add_book(sample_book_data).id


@pytest.fixture
def out_of_stock_book(catalog: CatalogManager) -> str:
    """A title with no copies on the shelf."""
    return catalog.add_book(
        BookCreate(id="X", title="Gone Book", author="Nobody", available=0)
    ).id


@pytest.fixture
def sample_user(membership: MembershipManager) -> int:
    """Register the sample member and return their id."""
    user = membership.register_user(
        UserCreate(
            name="Paul Ardiente",
            email="paulandrei@gmail.com",
            joined=date(2024, 12, 1),
        )
    )
    return user.id
