"""SQLAlchemy models for the loan ledger.

Tables:
- loans: One row per borrow, updated once on return
"""

from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.models import Base, Book, utc_now
from ..membership.models import User


class Loan(Base):
    """Loan model - tracks one copy of a book lent to a user."""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint(
            "status IN ('borrowed', 'returned', 'overdue')", name="ck_loans_status"
        ),
        # Range scans for overdue retrieval
        Index("ix_loans_due_date", "due_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    book_id: Mapped[str] = mapped_column(
        String(13), ForeignKey("books.id"), nullable=False, index=True
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="borrowed")

    # Dates
    loan_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    due_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    return_date: Mapped[Optional[str]] = mapped_column(String(10))  # ISO date

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(26), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(26), default=utc_now, onupdate=utc_now)

    # Relationships
    book: Mapped["Book"] = relationship("Book")
    user: Mapped["User"] = relationship("User", back_populates="loans")

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, status={self.status})>"

    @property
    def is_open(self) -> bool:
        """Check if the copy is still out."""
        return self.status != "returned"

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """Check if loan is past its due date and not returned."""
        return is_overdue(self.status, self.due_date, today)

    def days_overdue(self, today: Optional[date] = None) -> int:
        """Days overdue (0 if not overdue)."""
        if not self.is_overdue(today):
            return 0
        return ((today or date.today()) - date.fromisoformat(self.due_date)).days


def is_overdue(status: str, due_date: Optional[str], today: Optional[date] = None) -> bool:
    """Overdue predicate shared by the ledger and the index.

    A loan is overdue when it has not been returned and its due date is
    strictly before ``today``.
    """
    if status == "returned" or not due_date:
        return False
    return due_date < (today or date.today()).isoformat()
