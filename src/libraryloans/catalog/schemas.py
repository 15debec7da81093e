"""Pydantic schemas for catalog data validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def normalize_book_id(book_id: str) -> str:
    """Drop the hyphens and spaces printed in ISBNs."""
    return book_id.replace("-", "").replace(" ", "").strip()


class BookBase(BaseModel):
    """Base book fields."""

    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    genre: Optional[str] = Field(None, max_length=50)
    published_year: Optional[int] = Field(None, ge=0, le=9999)


class BookCreate(BookBase):
    """Schema for adding a title to the catalog."""

    id: str = Field(..., min_length=1, max_length=13, description="ISBN")
    available: int = Field(0, ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def normalize_isbn(cls, v):
        if isinstance(v, str):
            return normalize_book_id(v)
        return v

    @field_validator("genre", mode="before")
    @classmethod
    def blank_genre_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class BookResponse(BookBase):
    """Schema for book responses."""

    id: str
    available: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
