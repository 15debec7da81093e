"""Loan ledger module.

Provides functionality for:
- Borrowing with an atomic availability check-and-decrement
- Returning loans exactly once
- Listing a member's loans
- Overdue retrieval and reclassification
"""

from .locks import KeyedLock
from .manager import LoanLedger
from .models import Loan, is_overdue
from .schemas import (
    LedgerStats,
    LoanResponse,
    LoanStatus,
    LoanView,
    OverdueLoanView,
    OverdueReport,
)

__all__ = [
    "LoanLedger",
    "KeyedLock",
    "Loan",
    "is_overdue",
    "LedgerStats",
    "LoanResponse",
    "LoanStatus",
    "LoanView",
    "OverdueLoanView",
    "OverdueReport",
]
