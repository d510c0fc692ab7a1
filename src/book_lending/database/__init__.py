"""
Database package for the Book Lending service.

- schema.py: SQLAlchemy tables
- session.py: engine, sessions and error translation
- book_repository.py / author_repository.py: the catalog store
- user_repository.py: the identity store
- seed.py: deterministic sample data
"""

from .author_repository import AuthorCreateSchema, AuthorRepository
from .book_repository import BookCreateSchema, BookRepository
from .exceptions import DuplicateError, NotFoundError, RepositoryException, StoreConflictError
from .repository import BaseRepository
from .schema import Author, Base, Book, BorrowedBook, User, new_id
from .session import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    safe_commit,
    safe_query,
    session_scope,
)
from .user_repository import UserCreateSchema, UserRepository

__all__ = [
    "Author",
    "AuthorCreateSchema",
    "AuthorRepository",
    "Base",
    "BaseRepository",
    "Book",
    "BookCreateSchema",
    "BookRepository",
    "BorrowedBook",
    "DatabaseManager",
    "DuplicateError",
    "NotFoundError",
    "RepositoryException",
    "StoreConflictError",
    "User",
    "UserCreateSchema",
    "UserRepository",
    "get_db_manager",
    "new_id",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
]
