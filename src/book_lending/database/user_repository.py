"""
User repository: the identity store.

Owns user records, password verification and the persisted borrowed-book
set. Passwords are hashed with passlib's ``pbkdf2_sha256`` (salted, one
way); plaintext is never stored, compared directly or logged.
"""

import logging

from passlib.context import CryptContext
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from ..database.schema import BorrowedBook as BorrowedBookDB
from ..database.schema import User as UserDB
from ..database.session import safe_commit, safe_query
from ..models.user import User as UserModel
from .exceptions import DuplicateError, StoreConflictError
from .repository import BaseRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


class UserCreateSchema(BaseModel):
    """Schema for registering a user."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, repr=False)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be blank")
        return v


class UserRepository(BaseRepository[UserDB, UserModel]):
    """Repository for users and their borrowed books."""

    @property
    def model_class(self):
        return UserDB

    @property
    def response_schema(self):
        return UserModel

    def _get_db_obj(self, id: str) -> UserDB | None:
        query = (
            select(UserDB)
            .where(UserDB.id == str(id))
            .options(selectinload(UserDB.loans))
            .execution_options(populate_existing=True)
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get User by ID",
        )

    def _get_by_username(self, username: str) -> UserDB | None:
        query = (
            select(UserDB)
            .where(UserDB.username == username.strip())
            .options(selectinload(UserDB.loans))
            .execution_options(populate_existing=True)
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get User by username",
        )

    def find_user_by_id(self, user_id: str) -> UserModel | None:
        return self.get_by_id(user_id)

    def find_user_by_username(self, username: str) -> UserModel | None:
        db_obj = self._get_by_username(username)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def create_user(self, data: UserCreateSchema) -> UserModel:
        """
        Register a user.

        Raises:
            DuplicateError: If the username is taken
        """
        db_obj = UserDB(username=data.username, password_hash=hash_password(data.password))
        self.session.add(db_obj)
        try:
            safe_commit(self.session, "create User")
        except StoreConflictError as e:
            raise DuplicateError(f"Username {data.username!r} is already taken") from e
        self.session.refresh(db_obj)
        logger.info("Registered user %s", db_obj.username)
        return self._to_response_model(db_obj)

    def verify_password(self, username: str, password: str) -> UserModel | None:
        """
        Return the user if ``password`` matches, otherwise None.

        An unknown username still costs one hash verification so response
        timing does not reveal which usernames exist.
        """
        db_obj = self._get_by_username(username)
        if db_obj is None:
            pwd_context.dummy_verify()
            return None
        if not check_password(password, db_obj.password_hash):
            return None
        return self._to_response_model(db_obj)

    # Borrowed-set persistence. None of these commit; the lending engine
    # commits them together with the matching catalog flag change.

    def borrowed_book_ids(self, user_id: str) -> list[str]:
        query = (
            select(BorrowedBookDB.book_id)
            .where(BorrowedBookDB.user_id == user_id)
            .order_by(BorrowedBookDB.borrowed_at, BorrowedBookDB.book_id)
        )
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get borrowed books",
            )
        )

    def add_borrowed(self, user_id: str, book_id: str) -> None:
        """
        Record that ``user_id`` holds ``book_id``.

        Raises:
            StoreConflictError: If some user already holds the book
        """
        self.session.add(BorrowedBookDB(book_id=book_id, user_id=user_id))
        safe_query(self.session, lambda s: s.flush(), f"Book {book_id} is already held")

    def remove_borrowed(self, user_id: str, book_id: str) -> bool:
        """Delete the holding row only if ``user_id`` is the holder. True if removed."""
        # "evaluate" also removes the row's object from this session, so the
        # same book can be added again before the session closes
        stmt = (
            delete(BorrowedBookDB)
            .where(BorrowedBookDB.book_id == book_id, BorrowedBookDB.user_id == user_id)
            .execution_options(synchronize_session="evaluate")
        )
        result = safe_query(
            self.session,
            lambda s: s.execute(stmt),
            f"Failed to release book {book_id}",
        )
        return result.rowcount == 1
