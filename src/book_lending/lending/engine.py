"""
Lending engine: borrow and return transitions.

A book is either available (``is_booked`` false, nobody holds it) or
borrowed (``is_booked`` true, exactly one user holds it). The engine is the
only code that changes either half of that fact, and it changes both in a
single transaction per book:

- borrow: ``mark_booked`` (conditional UPDATE) + insert the holding row
- return: delete the holding row for this user + ``mark_available``

Exclusivity is enforced by the store, not by a lock held here. A borrow
whose conditional UPDATE matches no row lost to another borrower (or named
an unknown book) and is reported as a failure for that id. A write
rejected by a constraint or a database lock is rolled back and retried
``conflict_retries`` times before being reported the same way.

Batches have no atomicity beyond the authentication check: every id that
was committed stays committed, including when the deadline passes midway.
"""

import logging
import time
from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from ..database.book_repository import BookRepository
from ..database.exceptions import StoreConflictError
from ..database.session import safe_commit
from ..database.user_repository import UserRepository
from ..models.book import Book
from ..models.results import BookUpdateResult
from ..models.user import User

logger = logging.getLogger(__name__)

BORROW_SUCCESS_MESSAGE = "books borrowed successfully"
BORROW_EMPTY_MESSAGE = "no books requested"
BORROW_LOGIN_REQUIRED_MESSAGE = "you must be logged in to borrow books"
RETURN_SUCCESS_MESSAGE = "book returned successfully"
RETURN_LOGIN_REQUIRED_MESSAGE = "you must be logged in to return books"


def borrow_failure_message(failed: Sequence[str], unprocessed: Sequence[str] = ()) -> str:
    parts = []
    if failed:
        parts.append(f"the following books couldn't be borrowed: {', '.join(failed)}")
    if unprocessed:
        parts.append(f"not processed before the deadline: {', '.join(unprocessed)}")
    return "; ".join(parts)


def return_failure_message(book_id: str) -> str:
    return f"book {book_id} could not be returned"


class LendingEngine:
    """Performs borrow and return transitions against one session."""

    def __init__(
        self,
        session: Session,
        conflict_retries: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.books = BookRepository(session)
        self.users = UserRepository(session)
        self.conflict_retries = conflict_retries
        self._clock = clock

    def _expired(self, deadline: float | None) -> bool:
        return deadline is not None and self._clock() >= deadline

    def borrow_books(
        self,
        book_ids: Sequence[str],
        requester: User | None,
        deadline: float | None = None,
    ) -> BookUpdateResult:
        """
        Borrow every id in ``book_ids`` for ``requester``.

        An anonymous requester gets a failure with nothing changed. Otherwise
        ids are attempted in order; an id that cannot be borrowed (unknown,
        already borrowed, or repeated earlier in the same batch) is recorded
        as failed and the batch continues.

        Args:
            book_ids: Ids to borrow, in order
            requester: Authenticated user, or None for anonymous
            deadline: ``clock()`` value after which remaining ids are skipped

        Returns:
            Envelope whose ``books`` holds the books borrowed by this call
        """
        if requester is None:
            return BookUpdateResult(success=False, message=BORROW_LOGIN_REQUIRED_MESSAGE)

        if not book_ids:
            return BookUpdateResult(success=True, message=BORROW_EMPTY_MESSAGE)

        borrowed: list[Book] = []
        failed: list[str] = []
        unprocessed: list[str] = []

        for index, book_id in enumerate(book_ids):
            if self._expired(deadline):
                unprocessed = list(book_ids[index:])
                logger.warning(
                    "Deadline reached while borrowing for %s; %d ids not processed",
                    requester.username,
                    len(unprocessed),
                )
                break

            book = self.borrow(book_id, requester)
            if book is None:
                failed.append(book_id)
            else:
                borrowed.append(book)

        if failed or unprocessed:
            logger.info("Borrow for %s left %s unborrowed", requester.username, failed + unprocessed)
            return BookUpdateResult(
                success=False,
                message=borrow_failure_message(failed, unprocessed),
                books=borrowed,
            )

        return BookUpdateResult(success=True, message=BORROW_SUCCESS_MESSAGE, books=borrowed)

    def borrow(self, book_id: str, requester: User) -> Book | None:
        """Move one book to borrowed for ``requester``. None if it was not available."""
        for attempt in range(self.conflict_retries + 1):
            try:
                if not self.books.mark_booked(book_id):
                    self.session.rollback()
                    return None
                self.users.add_borrowed(requester.id, book_id)
                safe_commit(self.session, f"borrow book {book_id}")
            except StoreConflictError as e:
                self.session.rollback()
                logger.info("Conflict borrowing %s (attempt %d): %s", book_id, attempt + 1, e)
                continue

            logger.debug("User %s borrowed %s", requester.username, book_id)
            return self.books.find_book_by_id(book_id)

        logger.warning("Giving up on borrowing %s after repeated conflicts", book_id)
        return None

    def return_book(
        self,
        book_id: str,
        requester: User | None,
        deadline: float | None = None,
    ) -> BookUpdateResult:
        """
        Return one book held by ``requester``.

        Unknown ids, books that are not borrowed and books held by someone
        else all produce the same failure, with nothing changed.
        """
        if requester is None:
            return BookUpdateResult(success=False, message=RETURN_LOGIN_REQUIRED_MESSAGE)

        if self._expired(deadline):
            logger.warning("Deadline reached before returning %s", book_id)
            return BookUpdateResult(success=False, message=return_failure_message(book_id))

        for attempt in range(self.conflict_retries + 1):
            try:
                if not self.users.remove_borrowed(requester.id, book_id):
                    self.session.rollback()
                    logger.info("User %s does not hold %s", requester.username, book_id)
                    return BookUpdateResult(
                        success=False, message=return_failure_message(book_id)
                    )
                if not self.books.mark_available(book_id):
                    # Held but not flagged; dropping the holding row repairs it
                    logger.warning("Book %s was held but not flagged as booked", book_id)
                safe_commit(self.session, f"return book {book_id}")
            except StoreConflictError as e:
                self.session.rollback()
                logger.info("Conflict returning %s (attempt %d): %s", book_id, attempt + 1, e)
                continue

            logger.debug("User %s returned %s", requester.username, book_id)
            book = self.books.find_book_by_id(book_id)
            return BookUpdateResult(
                success=True,
                message=RETURN_SUCCESS_MESSAGE,
                books=[book] if book else [],
            )

        logger.warning("Giving up on returning %s after repeated conflicts", book_id)
        return BookUpdateResult(success=False, message=return_failure_message(book_id))
