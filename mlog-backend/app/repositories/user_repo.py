# File: app/repositories/user_repo.py

"""
Credential store: persistence of User rows keyed by unique email.
"""

from contextlib import contextmanager
from typing import ContextManager, Iterator, Optional, Protocol

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User


class DuplicateRecordError(Exception):
    """A write violated a unique constraint (e.g. an email that already exists)."""


class UserRepository(Protocol):
    def transaction(self) -> ContextManager[None]: ...

    def exists_by_email(self, email: str) -> bool: ...

    def find_by_email(self, email: str) -> Optional[User]: ...

    def save(self, user: User) -> User: ...


class SqlAlchemyUserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Scoped transaction: commits when the block exits normally,
        rolls back when it raises.
        """
        with self.db.begin():
            yield

    def exists_by_email(self, email: str) -> bool:
        return bool(self.db.scalar(select(exists().where(User.email == email))))

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).one_or_none()

    def save(self, user: User) -> User:
        """Add or update a user and flush so constraint violations surface here."""
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise DuplicateRecordError(str(exc.orig)) from exc
        return user
