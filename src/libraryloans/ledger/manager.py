"""Loan ledger: borrow, return and overdue retrieval."""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import func, select, update

from ..catalog.manager import CatalogManager
from ..catalog.schemas import normalize_book_id
from ..config import Config, get_config
from ..db.models import Book
from ..db.sqlite import Database, get_db
from ..errors import AlreadyReturned, LoanLimitExceeded, LoanNotFound, UnknownBook, UnknownUser
from ..membership.manager import MembershipManager
from ..membership.models import User
from ..overdue.index import OverdueIndex
from .locks import KeyedLock
from .models import Loan
from .schemas import (
    LedgerStats,
    LoanStatus,
    LoanView,
    OverdueLoanView,
    OverdueReport,
)

logger = logging.getLogger(__name__)


class LoanLedger:
    """Owns loan records and the availability they consume.

    Borrows are serialized per book id and returns per loan id. Operations
    on different keys proceed independently.
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        catalog: Optional[CatalogManager] = None,
        membership: Optional[MembershipManager] = None,
        config: Optional[Config] = None,
    ):
        """Initialize the ledger.

        Args:
            db: Database instance
            catalog: Catalog to draw copies from (built on ``db`` if omitted)
            membership: Member registry (built on ``db`` if omitted)
            config: Loan policy settings
        """
        self.db = db or get_db()
        self.catalog = catalog or CatalogManager(self.db)
        self.membership = membership or MembershipManager(self.db)
        self.config = config or get_config()
        self.index = OverdueIndex(self.db)
        self._book_locks = KeyedLock()
        self._loan_locks = KeyedLock()

    @property
    def loan_period(self) -> timedelta:
        return timedelta(days=self.config.loan_period_days)

    # -------------------------------------------------------------------------
    # Borrow / Return
    # -------------------------------------------------------------------------

    def borrow(self, user_id: int, book_id: str, today: Optional[date] = None) -> int:
        """Lend one copy of a book to a member.

        The availability check, the decrement and the loan insert commit as
        one transaction; any failure leaves no trace.

        Args:
            user_id: Borrowing member
            book_id: Book to take a copy of
            today: Loan date (default: today)

        Returns:
            New loan ID

        Raises:
            UnknownUser: user_id is not a member
            UnknownBook: book_id is not in the catalog
            OutOfStock: No copies available
            LoanLimitExceeded: The member is at the configured loan limit
        """
        today = today or date.today()
        book_id = normalize_book_id(book_id)

        if not self.membership.exists(user_id):
            raise UnknownUser(user_id)
        if not self.catalog.book_exists(book_id):
            raise UnknownBook(book_id)

        with self._book_locks.hold(book_id):
            try:
                with self.db.get_session() as session:
                    self.catalog.decrement_availability(book_id, session=session)

                    # Counted after the decrement so the write lock is held
                    limit = self.config.max_active_loans
                    if limit is not None and self._count_open_loans(session, user_id) >= limit:
                        raise LoanLimitExceeded(user_id, limit)

                    loan = Loan(
                        user_id=user_id,
                        book_id=book_id,
                        status=LoanStatus.BORROWED.value,
                        loan_date=today.isoformat(),
                        due_date=(today + self.loan_period).isoformat(),
                    )
                    session.add(loan)
                    session.flush()
                    loan_id = loan.id
            except Exception as e:
                logger.warning("Borrow of %s by user %s refused: %s", book_id, user_id, e)
                raise

        logger.info("Loan %s: user %s borrowed %s", loan_id, user_id, book_id)
        return loan_id

    def return_loan(self, loan_id: int, today: Optional[date] = None) -> Loan:
        """Close a loan and put its copy back on the shelf.

        Args:
            loan_id: Loan to close
            today: Return date (default: today)

        Returns:
            The returned loan

        Raises:
            LoanNotFound: No such loan
            AlreadyReturned: The loan was closed before
        """
        today = today or date.today()

        with self._loan_locks.hold(loan_id):
            with self.db.get_session() as session:
                result = session.execute(
                    update(Loan)
                    .where(Loan.id == loan_id, Loan.status != LoanStatus.RETURNED.value)
                    .values(status=LoanStatus.RETURNED.value, return_date=today.isoformat())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    if session.get(Loan, loan_id) is None:
                        raise LoanNotFound(loan_id)
                    logger.warning("Loan %s returned twice", loan_id)
                    raise AlreadyReturned(loan_id)

                loan = session.get(Loan, loan_id)
                self.catalog.increment_availability(loan.book_id, session=session)
                session.commit()
                session.refresh(loan)
                session.expunge(loan)

        logger.info("Loan %s returned on %s", loan_id, loan.return_date)
        return loan

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_loan(self, loan_id: int) -> Loan:
        """Get a loan by ID.

        Raises:
            LoanNotFound: No such loan
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if loan is None:
                raise LoanNotFound(loan_id)
            session.expunge(loan)
            return loan

    def list_loans_for_user(self, user_id: int) -> list[LoanView]:
        """All loans of a member with book title and author, oldest first.

        Raises:
            UnknownUser: user_id is not a member
        """
        if not self.membership.exists(user_id):
            raise UnknownUser(user_id)

        with self.db.get_session() as session:
            stmt = (
                select(Loan, Book.title, Book.author)
                .join(Book, Loan.book_id == Book.id)
                .where(Loan.user_id == user_id)
                .order_by(Loan.id)
            )
            return [
                LoanView(
                    id=loan.id,
                    book_id=loan.book_id,
                    title=title,
                    author=author,
                    loan_date=date.fromisoformat(loan.loan_date),
                    due_date=date.fromisoformat(loan.due_date),
                    return_date=date.fromisoformat(loan.return_date) if loan.return_date else None,
                    status=LoanStatus(loan.status),
                )
                for loan, title, author in session.execute(stmt).all()
            ]

    def list_overdue(self, today: Optional[date] = None) -> list[OverdueLoanView]:
        """Open loans due strictly before ``today``, with book and borrower.

        Candidate ids come from the due-date index; rows are then joined for
        display. Ordered by due date, oldest first.
        """
        today = today or date.today()

        with self.db.get_session() as session:
            loan_ids = self.index.range_before(today, session=session)
            if not loan_ids:
                return []

            stmt = (
                select(Loan, Book.title, User.name)
                .join(Book, Loan.book_id == Book.id)
                .join(User, Loan.user_id == User.id)
                .where(Loan.id.in_(loan_ids))
                .where(Loan.status.in_(LoanStatus.open_values()))
            )
            rows = {loan.id: (loan, title, name) for loan, title, name in session.execute(stmt).all()}

            views = []
            for loan_id in loan_ids:
                # Returned since the index read
                if loan_id not in rows:
                    continue
                loan, title, user_name = rows[loan_id]
                views.append(
                    OverdueLoanView(
                        id=loan.id,
                        book_id=loan.book_id,
                        title=title,
                        user_id=loan.user_id,
                        user_name=user_name,
                        loan_date=date.fromisoformat(loan.loan_date),
                        due_date=date.fromisoformat(loan.due_date),
                        return_date=date.fromisoformat(loan.return_date) if loan.return_date else None,
                        status=LoanStatus(loan.status),
                        days_overdue=loan.days_overdue(today),
                    )
                )
            return views

    def overdue_report(self, today: Optional[date] = None) -> OverdueReport:
        """Summarize overdue loans as of ``today``."""
        today = today or date.today()
        loans = self.list_overdue(today)
        return OverdueReport(
            as_of=today,
            loans=loans,
            total_overdue=len(loans),
            oldest_overdue_days=max((loan.days_overdue for loan in loans), default=0),
        )

    def mark_overdue(self, today: Optional[date] = None) -> int:
        """Persist the overdue classification for past-due borrowed loans.

        Returns:
            Number of loans reclassified
        """
        today = today or date.today()

        with self.db.get_session() as session:
            result = session.execute(
                update(Loan)
                .where(
                    Loan.status == LoanStatus.BORROWED.value,
                    Loan.due_date < today.isoformat(),
                )
                .values(status=LoanStatus.OVERDUE.value)
                .execution_options(synchronize_session=False)
            )
            count = result.rowcount

        if count:
            logger.info("Marked %s loans overdue as of %s", count, today)
        return count

    def get_stats(self, today: Optional[date] = None) -> LedgerStats:
        """Get overall loan statistics."""
        today = today or date.today()

        with self.db.get_session() as session:
            total = session.execute(select(func.count()).select_from(Loan)).scalar() or 0
            returned = session.execute(
                select(func.count()).where(Loan.status == LoanStatus.RETURNED.value)
            ).scalar() or 0
            borrowers = session.execute(
                select(func.count(func.distinct(Loan.user_id))).where(
                    Loan.status.in_(LoanStatus.open_values())
                )
            ).scalar() or 0
            overdue = len(self.index.range_before(today, session=session))

        return LedgerStats(
            total_loans=total,
            open_loans=total - returned,
            returned_loans=returned,
            overdue_loans=overdue,
            borrowers_with_open_loans=borrowers,
        )

    def _count_open_loans(self, session, user_id: int) -> int:
        return session.execute(
            select(func.count()).where(
                Loan.user_id == user_id,
                Loan.status.in_(LoanStatus.open_values()),
            )
        ).scalar() or 0

