"""Membership manager for library users."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.sqlite import Database, get_db
from ..errors import DuplicateEmail, UnknownUser
from .models import User
from .schemas import UserCreate

logger = logging.getLogger(__name__)


class MembershipManager:
    """Manages registered library members."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize membership manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def register_user(self, data: UserCreate) -> User:
        """Register a new member.

        Args:
            data: User creation data

        Returns:
            Created user

        Raises:
            DuplicateEmail: The email is already registered
        """
        try:
            with self.db.get_session() as session:
                taken = session.execute(
                    select(User.id).where(func.lower(User.email) == data.email)
                ).first()
                if taken:
                    raise DuplicateEmail(data.email)

                user = User(
                    name=data.name,
                    email=data.email,
                    joined=(data.joined or date.today()).isoformat(),
                )
                session.add(user)
                session.commit()
                session.refresh(user)
                session.expunge(user)
        except IntegrityError as e:
            # Lost a race with another registration of the same address
            raise DuplicateEmail(data.email) from e

        logger.info("Registered user %s <%s>", user.id, user.email)
        return user

    def exists(self, user_id: int, session: Optional[Session] = None) -> bool:
        """Check if a user id belongs to a registered member."""

        def _exists(s: Session) -> bool:
            return s.execute(select(User.id).where(User.id == user_id)).first() is not None

        if session:
            return _exists(session)
        with self.db.get_session() as s:
            return _exists(s)

    def get_user(self, user_id: int) -> User:
        """Get a user by ID.

        Raises:
            UnknownUser: No such user
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise UnknownUser(user_id)
            session.expunge(user)
            return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case insensitive).

        Returns:
            User or None
        """
        with self.db.get_session() as session:
            stmt = select(User).where(func.lower(User.email) == email.strip().lower())
            user = session.execute(stmt).scalar_one_or_none()
            if user:
                session.expunge(user)
            return user

    def list_users(self) -> list[User]:
        """List all members ordered by id."""
        with self.db.get_session() as session:
            users = session.execute(select(User).order_by(User.id)).scalars().all()
            for user in users:
                session.expunge(user)
            return list(users)
