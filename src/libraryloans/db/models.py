"""SQLAlchemy ORM models for the local SQLite database.

Tables:
- books: Catalog titles and their available copy counts

Users live in ``membership.models`` and loans in ``ledger.models``; both
register themselves on the shared ``Base``.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> str:
    """Current UTC timestamp as an ISO string."""
    return datetime.now(timezone.utc).isoformat()


class Book(Base):
    """Book model - one catalog title keyed by ISBN."""

    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("available >= 0", name="ck_books_available_non_negative"),
    )

    # ISBN-10 or ISBN-13
    id: Mapped[str] = mapped_column(String(13), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    genre: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    published_year: Mapped[Optional[int]] = mapped_column(Integer)

    # Physical copies on the shelf
    available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(26), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(26), default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', available={self.available})>"

    @property
    def in_stock(self) -> bool:
        """Check if at least one copy can be borrowed."""
        return self.available > 0
