"""Test configuration and fixtures for the Book Lending service.

Each test gets its own SQLite database, a test configuration with a fixed
signing key, and a small catalog: one author with three books, one book
without an author, and two users. ``assert_lending_invariant`` checks the
book/holder consistency rule and is called after every mutation.
"""

import os
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from book_lending.api.facade import LendingFacade
from book_lending.config import ServiceConfig, reset_config
from book_lending.database import (
    AuthorCreateSchema,
    AuthorRepository,
    BookCreateSchema,
    BookRepository,
    DatabaseManager,
    UserCreateSchema,
    UserRepository,
)
from book_lending.database.schema import Book as BookDB
from book_lending.database.schema import BorrowedBook as BorrowedBookDB
from book_lending.lending.engine import LendingEngine
from book_lending.models import User
from book_lending.observability import ObservabilityConfig, initialize_observability

TEST_SECRET = "test-signing-key-0123456789"  # noqa: S105
PASSWORD = "correct horse battery staple"  # noqa: S105


def pytest_configure(config):  # noqa: ARG001
    """Keep logfire local during tests."""
    initialize_observability(ObservabilityConfig(send_to_logfire=False, console_output=False))


# === Configuration Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_lending.db"


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[ServiceConfig, None, None]:
    """A test-specific configuration with a fixed signing key."""
    reset_config()

    config = ServiceConfig(
        service_name="test-book-lending",
        database_path=test_db_path,
        jwt_secret=TEST_SECRET,
        token_ttl_minutes=5,
        debug=True,
        log_level="DEBUG",
    )

    yield config

    reset_config()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide an environment without BOOK_LENDING_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("BOOK_LENDING_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# === Database Fixtures ===


@pytest.fixture
def db_manager(test_config: ServiceConfig) -> Generator[DatabaseManager, None, None]:
    manager = DatabaseManager(test_config.get_database_url())
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.close()


@dataclass
class Catalog:
    """Ids of the sample records."""

    author_id: str
    book_ids: list[str]
    orphan_book_id: str
    alice: User
    bob: User


@pytest.fixture
def catalog(session: Session) -> Catalog:
    """One author with three books, one book without author, two users."""
    author = AuthorRepository(session).create_author(AuthorCreateSchema(name="Ursula K. Le Guin"))

    books = BookRepository(session)
    book_ids = [
        books.create_book(BookCreateSchema(title=title, author_id=author.id)).id
        for title in ("A Wizard of Earthsea", "The Dispossessed", "The Left Hand of Darkness")
    ]
    orphan = books.create_book(BookCreateSchema(title="Beowulf"))

    users = UserRepository(session)
    alice = users.create_user(UserCreateSchema(username="alice", password=PASSWORD))
    bob = users.create_user(UserCreateSchema(username="bob", password=PASSWORD))

    return Catalog(
        author_id=author.id,
        book_ids=book_ids,
        orphan_book_id=orphan.id,
        alice=alice,
        bob=bob,
    )


@pytest.fixture
def engine(session: Session) -> LendingEngine:
    return LendingEngine(session)


@pytest.fixture
def facade(db_manager: DatabaseManager, test_config: ServiceConfig) -> LendingFacade:
    return LendingFacade(db_manager=db_manager, config=test_config)


# === Invariant Helpers ===


def holdings(session: Session) -> dict[str, str]:
    """Map of book id to holder id, read straight from the database."""
    rows = session.execute(select(BorrowedBookDB.book_id, BorrowedBookDB.user_id)).all()
    return {book_id: user_id for book_id, user_id in rows}


def booked_flags(session: Session) -> dict[str, bool]:
    rows = session.execute(select(BookDB.id, BookDB.is_booked)).all()
    return {book_id: bool(is_booked) for book_id, is_booked in rows}


def assert_lending_invariant(session: Session) -> None:
    """A book is booked if and only if exactly one user holds it."""
    held = holdings(session)
    for book_id, is_booked in booked_flags(session).items():
        assert is_booked == (book_id in held), (
            f"book {book_id}: is_booked={is_booked} but holder={held.get(book_id)}"
        )
