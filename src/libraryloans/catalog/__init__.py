"""Book catalog module.

Provides functionality for:
- Adding and looking up titles
- Tracking available copies per title
- Bulk ingestion from CSV
"""

from .ingest import IngestResult, ingest_books_csv
from .manager import CatalogManager
from .schemas import BookCreate, BookResponse, normalize_book_id

__all__ = [
    "CatalogManager",
    "BookCreate",
    "BookResponse",
    "IngestResult",
    "ingest_books_csv",
    "normalize_book_id",
]
