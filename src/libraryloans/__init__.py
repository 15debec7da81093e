"""libraryloans - library catalog, membership and loan tracking.

The loan ledger keeps every book's available copy count consistent with
its open loans, even under concurrent borrowers.
"""

__version__ = "0.1.0"

from .catalog import BookCreate, CatalogManager, IngestResult, ingest_books_csv
from .config import Config, get_config, reset_config
from .db import Database, get_db, reset_db
from .errors import (
    AlreadyReturned,
    DuplicateBook,
    DuplicateEmail,
    IngestError,
    LibraryError,
    LoanLimitExceeded,
    LoanNotFound,
    NotFound,
    OutOfStock,
    UnknownBook,
    UnknownUser,
)
from .ledger import LoanLedger, LoanStatus, LoanView, OverdueLoanView, OverdueReport
from .membership import MembershipManager, UserCreate
from .overdue import OverdueIndex

__all__ = [
    "__version__",
    "BookCreate",
    "CatalogManager",
    "IngestResult",
    "ingest_books_csv",
    "Config",
    "get_config",
    "reset_config",
    "Database",
    "get_db",
    "reset_db",
    "AlreadyReturned",
    "DuplicateBook",
    "DuplicateEmail",
    "IngestError",
    "LibraryError",
    "LoanLimitExceeded",
    "LoanNotFound",
    "NotFound",
    "OutOfStock",
    "UnknownBook",
    "UnknownUser",
    "LoanLedger",
    "LoanStatus",
    "LoanView",
    "OverdueLoanView",
    "OverdueReport",
    "MembershipManager",
    "UserCreate",
    "OverdueIndex",
]
