"""
Result envelopes returned by the lending façade.

Expected business-rule failures (already borrowed, not logged in, not the
holder) never raise: they come back as ``success=False`` with a message so
clients can render partial success.
"""

from pydantic import BaseModel, Field

from .book import Book
from .user import User


class BookUpdateResult(BaseModel):
    """Outcome of ``borrowBooks`` or ``returnBook``."""

    success: bool
    message: str | None = None
    books: list[Book] = Field(default_factory=list)

    @property
    def book_ids(self) -> list[str]:
        return [book.id for book in self.books]


class AuthPayload(BaseModel):
    """Successful login: the user plus a ``Bearer`` token."""

    user: User
    token: str = Field(..., repr=False)
