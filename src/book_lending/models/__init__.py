"""
Book Lending models.

Pydantic models returned by the stores and the façade:

- Book, Author: catalog records
- User: a borrower (never carries the password hash)
- BookUpdateResult, AuthPayload: operation results
- RequestContext, TokenClaim: per-request identity
"""

from .author import Author
from .book import Book
from .context import RequestContext, TokenClaim
from .results import AuthPayload, BookUpdateResult
from .user import User

__all__ = [
    "AuthPayload",
    "Author",
    "Book",
    "BookUpdateResult",
    "RequestContext",
    "TokenClaim",
    "User",
]
