"""Bulk catalog ingestion from CSV.

Expected columns (header names are case insensitive):
- id or isbn (required)
- title, author (required)
- genre, published_year (optional)
- available (optional, default 0)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd
from pydantic import ValidationError
from tqdm import tqdm

from ..db.sqlite import Database, get_db
from ..errors import DuplicateBook, IngestError
from .manager import CatalogManager
from .schemas import BookCreate

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    "isbn": "id",
    "isbn13": "id",
    "book_id": "id",
    "year": "published_year",
    "publishedyear": "published_year",
    "quantityavailable": "available",
    "copies": "available",
}


@dataclass
class IngestResult:
    """Result of an ingestion run."""

    imported: int = 0
    skipped: int = 0
    errors: list[tuple[int, str]] = field(default_factory=list)  # (row number, message)

    @property
    def total_processed(self) -> int:
        return self.imported + self.skipped + len(self.errors)


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for column in df.columns:
        key = str(column).strip().lower().replace(" ", "_")
        renamed[column] = COLUMN_ALIASES.get(key.replace("_", ""), COLUMN_ALIASES.get(key, key))
    return df.rename(columns=renamed)


def _parse_int(column: str, value: str) -> int:
    """Parse a whole number, accepting the "1999.0" spreadsheets produce."""
    if value.lstrip("+-").isdigit():
        return int(value)
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{column} must be a whole number, got {value!r}")
    return int(number)


def _row_to_book(row: dict) -> BookCreate:
    """Build a BookCreate from one CSV row of strings."""
    data = {k: v for k, v in row.items() if v != ""}
    for numeric in ("published_year", "available"):
        if numeric in data:
            data[numeric] = _parse_int(numeric, data[numeric])
    return BookCreate(**data)


def ingest_books_csv(
    file_path: Path | str,
    db: Optional[Database] = None,
    show_progress: bool = True,
) -> IngestResult:
    """Load catalog titles from a CSV file.

    Rows with an id already in the catalog are skipped. Invalid rows are
    recorded in the result and do not stop the run.

    Args:
        file_path: Path to the CSV file
        db: Database instance (uses global if not provided)
        show_progress: Show tqdm progress bar

    Returns:
        IngestResult with counts and errors

    Raises:
        IngestError: File missing, unreadable or without required columns
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise IngestError(f"File not found: {file_path}", path=str(file_path))

    try:
        df = pd.read_csv(file_path, dtype=str, na_values=[""], encoding="utf-8-sig")
        df = df.fillna("")
    except Exception as e:
        raise IngestError(f"Failed to read catalog CSV: {e}", path=str(file_path)) from e

    df = _normalize_columns(df)
    missing = {"id", "title", "author"} - set(df.columns)
    if missing:
        raise IngestError(
            f"Missing required columns: {', '.join(sorted(missing))}", path=str(file_path)
        )

    catalog = CatalogManager(db or get_db())
    result = IngestResult()

    rows = df.to_dict("records")
    iterator = tqdm(rows, desc="Ingesting books", disable=not show_progress)

    # Header is line 1
    for line_no, row in enumerate(iterator, start=2):
        row = {k: str(v).strip() for k, v in row.items()}
        if not any(row.values()):
            continue
        try:
            book = _row_to_book(row)
            catalog.add_book(book)
            result.imported += 1
        except DuplicateBook:
            result.skipped += 1
        except (ValidationError, ValueError, OverflowError) as e:
            logger.warning("Row %s of %s rejected: %s", line_no, file_path.name, e)
            result.errors.append((line_no, str(e)))

    logger.info(
        "Ingested %s books from %s (%s skipped, %s errors)",
        result.imported,
        file_path,
        result.skipped,
        len(result.errors),
    )
    return result
