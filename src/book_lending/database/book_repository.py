"""
Book repository: the catalog store.

Besides the read operations the façade needs, this repository exposes the
two check-and-set primitives the lending engine uses to flip a book's
``is_booked`` flag. Each is a single conditional ``UPDATE`` whose row
count tells the caller whether it won; two concurrent borrowers of the
same book cannot both see a row count of one.
"""

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.sql import func

from ..database.schema import Book as BookDB
from ..database.session import safe_commit, safe_query
from ..models.book import Book as BookModel
from .exceptions import NotFoundError
from .repository import BaseRepository


class BookCreateSchema(BaseModel):
    """Schema for adding a book to the catalog."""

    title: str | None = None
    author_id: str | None = None


class BookRepository(BaseRepository[BookDB, BookModel]):
    """Repository for book data access."""

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    def find_all_books(self) -> list[BookModel]:
        """Every book in the catalog, ordered by title."""
        return self.get_all(order_by="title")

    def find_book_by_id(self, book_id: str) -> BookModel | None:
        """The book with this id, or None if the catalog has no such book."""
        return self.get_by_id(book_id)

    def get_book_or_raise(self, book_id: str) -> BookModel:
        book = self.get_by_id(book_id)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")
        return book

    def find_books_by_author(self, author_id: str) -> list[BookModel]:
        """All books whose author reference is ``author_id``."""
        query = (
            select(BookDB)
            .where(BookDB.author_id == author_id)
            .order_by(BookDB.title)
            .execution_options(populate_existing=True)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get books by author",
        )
        return [self._to_response_model(book) for book in results]

    def find_books_by_ids(self, book_ids: list[str]) -> list[BookModel]:
        """Books for the given ids, in the order requested; unknown ids are dropped."""
        if not book_ids:
            return []
        query = (
            select(BookDB)
            .where(BookDB.id.in_(book_ids))
            .execution_options(populate_existing=True)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get books by ids",
        )
        by_id = {book.id: book for book in results}
        return [self._to_response_model(by_id[i]) for i in book_ids if i in by_id]

    def create_book(self, data: BookCreateSchema) -> BookModel:
        db_obj = BookDB(title=data.title, author_id=data.author_id, is_booked=False)
        self.session.add(db_obj)
        safe_commit(self.session, "create Book")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    # Check-and-set primitives. Neither commits: the lending engine commits
    # the flag change together with the borrowed-set change.

    def mark_booked(self, book_id: str) -> bool:
        """Set ``is_booked`` only if it is currently false. True if this call won."""
        return self._set_booked(book_id, booked=True)

    def mark_available(self, book_id: str) -> bool:
        """Clear ``is_booked`` only if it is currently true. True if this call won."""
        return self._set_booked(book_id, booked=False)

    def _set_booked(self, book_id: str, booked: bool) -> bool:
        stmt = (
            update(BookDB)
            .where(BookDB.id == book_id, BookDB.is_booked.is_(not booked))
            .values(is_booked=booked, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = safe_query(
            self.session,
            lambda s: s.execute(stmt),
            f"Failed to update booking state of book {book_id}",
        )
        return result.rowcount == 1
