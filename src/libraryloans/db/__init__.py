"""Database module for local SQLite storage."""

from .models import Base, Book
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "Database",
    "get_db",
    "reset_db",
]
