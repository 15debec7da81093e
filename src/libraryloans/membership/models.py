"""SQLAlchemy models for library membership.

Tables:
- users: Registered library members
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.models import Base, utc_now


class User(Base):
    """User model - a library member who can borrow books."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    joined: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date

    created_at: Mapped[str] = mapped_column(String(26), default=utc_now)

    # Relationships
    loans: Mapped[list["Loan"]] = relationship("Loan", back_populates="user")  # noqa: F821

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}', email='{self.email}')>"
