"""
Query/mutation façade.

The only surface the GraphQL layer talks to. Each operation opens its own
short-lived session, does its work through the stores, the gate or the
lending engine, and returns Pydantic models. The façade keeps no state
between calls. Mutations take the caller's identity from the request
context only, never from arguments.
"""

import logging
import time
from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from ..auth.gate import AuthorizationGate
from ..config import ServiceConfig, get_config
from ..database.author_repository import AuthorRepository
from ..database.book_repository import BookRepository
from ..database.session import DatabaseManager, get_db_manager
from ..lending.engine import LendingEngine
from ..models import Author, AuthPayload, Book, BookUpdateResult, RequestContext, User
from ..observability import trace_operation

logger = logging.getLogger(__name__)


class LendingFacade:
    """Dispatches the external operations onto the lending core."""

    def __init__(self, db_manager: DatabaseManager | None = None, config: ServiceConfig | None = None):
        self.config = config or get_config()
        self.db_manager = db_manager or get_db_manager()

    def _run[T](self, work: Callable[[Session], T]) -> T:
        with self.db_manager.session_scope() as session:
            return work(session)

    def _deadline(self) -> float:
        return time.monotonic() + self.config.request_timeout_seconds

    def _engine(self, session: Session) -> LendingEngine:
        return LendingEngine(session, conflict_retries=self.config.store_conflict_retries)

    # === Context ===

    async def build_context(self, authorization: str | None) -> RequestContext:
        """Resolve the request's ``Authorization`` header once, up front."""
        return self._run(lambda s: AuthorizationGate(s, self.config).build_context(authorization))

    # === Queries ===

    @trace_operation("books")
    async def books(self) -> list[Book]:
        return self._run(lambda s: BookRepository(s).find_all_books())

    @trace_operation("book")
    async def book(self, book_id: str) -> Book | None:
        return self._run(lambda s: BookRepository(s).find_book_by_id(book_id))

    async def author(self, author_id: str) -> Author | None:
        return self._run(lambda s: AuthorRepository(s).find_author_by_id(author_id))

    async def books_by_author(self, author_id: str) -> list[Book]:
        return self._run(lambda s: BookRepository(s).find_books_by_author(author_id))

    async def books_by_ids(self, book_ids: Sequence[str]) -> list[Book]:
        return self._run(lambda s: BookRepository(s).find_books_by_ids(list(book_ids)))

    @trace_operation("me")
    async def me(self, context: RequestContext) -> User | None:
        """The logged-in user, or None when the request is anonymous."""
        if not context.is_authenticated:
            logger.debug("me requested without a valid token")
            return None
        return context.logged_in_user

    # === Mutations ===

    @trace_operation("login")
    async def login(self, username: str, password: str) -> AuthPayload:
        """
        Raises:
            AuthenticationError: With the same message for every failure
        """
        return self._run(lambda s: AuthorizationGate(s, self.config).login(username, password))

    @trace_operation("borrow_books")
    async def borrow_books(self, book_ids: Sequence[str], context: RequestContext) -> BookUpdateResult:
        deadline = self._deadline()
        return self._run(
            lambda s: self._engine(s).borrow_books(
                list(book_ids), context.logged_in_user, deadline=deadline
            )
        )

    @trace_operation("return_book")
    async def return_book(self, book_id: str, context: RequestContext) -> BookUpdateResult:
        deadline = self._deadline()
        return self._run(
            lambda s: self._engine(s).return_book(book_id, context.logged_in_user, deadline=deadline)
        )
