"""Pydantic schemas for library members."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    """Schema for registering a member."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    joined: Optional[date] = None  # defaults to today

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case the address and require an @."""
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("email must look like name@domain")
        return v


class UserResponse(BaseModel):
    """Schema for member responses."""

    id: int
    name: str
    email: str
    joined: date

    model_config = {"from_attributes": True}
