"""Author repository: the author half of the catalog store."""

from pydantic import BaseModel

from ..database.schema import Author as AuthorDB
from ..database.session import safe_commit
from ..models.author import Author as AuthorModel
from .repository import BaseRepository


class AuthorCreateSchema(BaseModel):
    """Schema for creating an author."""

    name: str | None = None


class AuthorRepository(BaseRepository[AuthorDB, AuthorModel]):
    """Repository for author data access.

    An author's books are derived on read through
    ``BookRepository.find_books_by_author``; nothing here stores them.
    """

    @property
    def model_class(self):
        return AuthorDB

    @property
    def response_schema(self):
        return AuthorModel

    def find_author_by_id(self, author_id: str) -> AuthorModel | None:
        return self.get_by_id(author_id)

    def create_author(self, data: AuthorCreateSchema) -> AuthorModel:
        db_obj = AuthorDB(name=data.name)
        self.session.add(db_obj)
        safe_commit(self.session, "create Author")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)
