"""
SQLAlchemy database schema for the Book Lending service.

The ``borrowed_books`` table is the persisted form of a user's borrowed
set. Its primary key is the book id, so the database itself refuses a
second holder for the same book. ``books.is_booked`` mirrors the same fact
from the catalog side; the lending engine writes both in one transaction.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    false,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    """Generate a 24-character hex identifier."""
    return uuid4().hex[:24]


class Author(Base):
    """Authors table. An author's books are derived from ``books.author_id``."""

    __tablename__ = "authors"

    id = Column(String(24), primary_key=True, default=new_id)
    name = Column(String(200), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    books = relationship("Book", back_populates="author")


class Book(Base):
    """Books table - the lending catalog."""

    __tablename__ = "books"

    id = Column(String(24), primary_key=True, default=new_id)
    title = Column(String(500), nullable=True, index=True)
    is_booked = Column(Boolean, nullable=False, default=False, server_default=false())
    author_id = Column(String(24), ForeignKey("authors.id"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    author = relationship("Author", back_populates="books")
    loan = relationship("BorrowedBook", back_populates="book", uselist=False)

    __table_args__ = (
        Index("idx_book_author", "author_id"),
        Index("idx_book_is_booked", "is_booked"),
    )


class User(Base):
    """Users table. Only a salted hash of the password is stored."""

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    loans = relationship("BorrowedBook", back_populates="user", cascade="all, delete-orphan")

    @property
    def book_ids(self) -> list[str]:
        return [loan.book_id for loan in self.loans]


class BorrowedBook(Base):
    """One row per borrowed book; the primary key makes borrowing exclusive."""

    __tablename__ = "borrowed_books"

    book_id = Column(String(24), ForeignKey("books.id"), primary_key=True)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False)
    borrowed_at = Column(DateTime, nullable=False, default=func.now())

    book = relationship("Book", back_populates="loan")
    user = relationship("User", back_populates="loans")

    __table_args__ = (Index("idx_borrowed_user", "user_id"),)
