"""Pydantic schemas for the loan ledger."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class LoanStatus(str, Enum):
    """Status of a loan."""

    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"

    @classmethod
    def open_values(cls) -> list[str]:
        """Statuses of loans whose copy is still out."""
        return [cls.BORROWED.value, cls.OVERDUE.value]


class LoanResponse(BaseModel):
    """Schema for loan responses."""

    id: int
    user_id: int
    book_id: str
    status: LoanStatus
    loan_date: date
    due_date: date
    return_date: Optional[date]

    model_config = {"from_attributes": True}


class LoanView(BaseModel):
    """A member's loan joined with the book it covers."""

    id: int
    book_id: str
    title: str
    author: str
    loan_date: date
    due_date: date
    return_date: Optional[date]
    status: LoanStatus


class OverdueLoanView(BaseModel):
    """An overdue loan joined with book and borrower display fields."""

    id: int
    book_id: str
    title: str
    user_id: int
    user_name: str
    loan_date: date
    due_date: date
    return_date: Optional[date]
    status: LoanStatus
    days_overdue: int


class OverdueReport(BaseModel):
    """Report of overdue loans."""

    as_of: date
    loans: list[OverdueLoanView]
    total_overdue: int
    oldest_overdue_days: int


class LedgerStats(BaseModel):
    """Overall loan statistics."""

    total_loans: int
    open_loans: int
    returned_loans: int
    overdue_loans: int
    borrowers_with_open_loans: int
