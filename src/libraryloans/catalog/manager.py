"""Catalog manager for book records and copy counts."""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import Book
from ..db.sqlite import Database, get_db
from ..errors import DuplicateBook, OutOfStock, UnknownBook
from .schemas import BookCreate, normalize_book_id

logger = logging.getLogger(__name__)


class CatalogManager:
    """Manages catalog titles and their available copies."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize catalog manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    # -------------------------------------------------------------------------
    # Book Records
    # -------------------------------------------------------------------------

    def add_book(self, data: BookCreate) -> Book:
        """Add a new title to the catalog.

        Args:
            data: Book creation data

        Returns:
            Created book

        Raises:
            DuplicateBook: A book with this id already exists
        """
        try:
            with self.db.get_session() as session:
                if session.get(Book, data.id) is not None:
                    raise DuplicateBook(data.id)

                book = Book(
                    id=data.id,
                    title=data.title,
                    author=data.author,
                    genre=data.genre,
                    published_year=data.published_year,
                    available=data.available,
                )
                session.add(book)
                session.commit()
                session.refresh(book)
                session.expunge(book)
        except IntegrityError as e:
            raise DuplicateBook(data.id) from e

        logger.info("Added book %s (%s copies)", book.id, book.available)
        return book

    def get_book(self, book_id: str) -> Book:
        """Get a book by ID.

        Raises:
            UnknownBook: No such book
        """
        book_id = normalize_book_id(book_id)
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if book is None:
                raise UnknownBook(book_id)
            session.expunge(book)
            return book

    def book_exists(self, book_id: str, session: Optional[Session] = None) -> bool:
        """Check if a book is in the catalog."""
        book_id = normalize_book_id(book_id)

        def _exists(s: Session) -> bool:
            stmt = select(Book.id).where(Book.id == book_id)
            return s.execute(stmt).first() is not None

        if session:
            return _exists(session)
        with self.db.get_session() as s:
            return _exists(s)

    def list_books(self, genre: Optional[str] = None) -> list[Book]:
        """List catalog titles.

        Args:
            genre: Filter by genre (case insensitive)

        Returns:
            Books ordered by title
        """
        with self.db.get_session() as session:
            stmt = select(Book).order_by(Book.title, Book.id)
            if genre:
                stmt = stmt.where(Book.genre.ilike(genre))

            books = session.execute(stmt).scalars().all()
            for book in books:
                session.expunge(book)
            return list(books)

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def get_availability(self, book_id: str, session: Optional[Session] = None) -> int:
        """Get the number of copies on the shelf.

        Raises:
            UnknownBook: No such book
        """
        book_id = normalize_book_id(book_id)

        def _get(s: Session) -> int:
            available = s.execute(
                select(Book.available).where(Book.id == book_id)
            ).scalar_one_or_none()
            if available is None:
                raise UnknownBook(book_id)
            return available

        if session:
            return _get(session)
        with self.db.get_session() as s:
            return _get(s)

    def decrement_availability(self, book_id: str, session: Optional[Session] = None) -> None:
        """Take one copy off the shelf.

        The check and the decrement are a single conditional UPDATE, so two
        writers can never both consume the last copy. When a session is
        given the change commits or rolls back with the caller's work.

        Raises:
            OutOfStock: No copies available
            UnknownBook: No such book
        """
        book_id = normalize_book_id(book_id)

        def _decrement(s: Session) -> None:
            result = s.execute(
                update(Book)
                .where(Book.id == book_id, Book.available > 0)
                .values(available=Book.available - 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                return
            if not self.book_exists(book_id, session=s):
                raise UnknownBook(book_id)
            raise OutOfStock(book_id)

        if session:
            _decrement(session)
        else:
            with self.db.get_session() as s:
                _decrement(s)

    def increment_availability(self, book_id: str, session: Optional[Session] = None) -> None:
        """Put one copy back on the shelf.

        Raises:
            UnknownBook: No such book
        """
        book_id = normalize_book_id(book_id)

        def _increment(s: Session) -> None:
            result = s.execute(
                update(Book)
                .where(Book.id == book_id)
                .values(available=Book.available + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise UnknownBook(book_id)

        if session:
            _increment(session)
        else:
            with self.db.get_session() as s:
                _increment(s)
