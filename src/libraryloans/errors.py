"""Exceptions raised by the library loan services.

Every error is per-request: it is raised to the caller and the enclosing
database session is rolled back, so availability and loan status are left
as they were.
"""

from typing import Optional


class LibraryError(Exception):
    """Base exception for library system errors."""


class NotFound(LibraryError):
    """A referenced book, user or loan does not exist."""


class UnknownBook(NotFound):
    """Requested book id does not exist in the catalog."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book not found: {book_id}")


class UnknownUser(NotFound):
    """Requested user id is not a registered member."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class LoanNotFound(NotFound):
    """Requested loan id does not exist."""

    def __init__(self, loan_id: int):
        self.loan_id = loan_id
        super().__init__(f"Loan not found: {loan_id}")


class AlreadyReturned(NotFound):
    """The loan was already returned; there is no open loan to close."""

    def __init__(self, loan_id: int):
        self.loan_id = loan_id
        super().__init__(f"Loan {loan_id} has already been returned")


class OutOfStock(LibraryError):
    """No copies of the book are available to borrow."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"No available copies of book {book_id}")


class DuplicateBook(LibraryError):
    """Trying to add a book that already exists."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book already exists: {book_id}")


class DuplicateEmail(LibraryError):
    """Trying to register a member with an email that is already taken."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already registered: {email}")


class LoanLimitExceeded(LibraryError):
    """The user already holds the maximum number of open loans."""

    def __init__(self, user_id: int, limit: int):
        self.user_id = user_id
        self.limit = limit
        super().__init__(f"User {user_id} already has {limit} books on loan")


class IngestError(LibraryError):
    """Raised when a catalog file cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)
