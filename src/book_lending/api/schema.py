"""
GraphQL schema for the lending façade.

Strawberry executes the schema; every resolver is a thin call into
``LendingFacade``. The strawberry context is a ``GraphQLContext`` built
once per request by ``get_context`` from the ``Authorization`` header.

Example:
    mutation {
        borrowBooks(ids: ["65f1c0a2b3d4e5f6a7b8c9d0"]) {
            success
            message
            books { _id title isBooked }
        }
    }
"""

from dataclasses import dataclass

import strawberry

from ..models import Author, Book, BookUpdateResult, RequestContext, User
from .facade import LendingFacade


@dataclass(frozen=True)
class GraphQLContext:
    """Per-request context handed to strawberry as ``context_value``."""

    facade: LendingFacade
    request: RequestContext


async def get_context(facade: LendingFacade, authorization: str | None) -> GraphQLContext:
    """Build the context for one request from its ``Authorization`` header."""
    return GraphQLContext(facade=facade, request=await facade.build_context(authorization))


@strawberry.type(name="Author")
class AuthorType:
    id: strawberry.ID = strawberry.field(name="_id")
    name: str | None

    @strawberry.field
    async def books(self, info: strawberry.Info) -> "list[BookType]":
        books = await info.context.facade.books_by_author(str(self.id))
        return [BookType.from_model(book) for book in books]

    @classmethod
    def from_model(cls, author: Author) -> "AuthorType":
        return cls(id=strawberry.ID(author.id), name=author.name)


@strawberry.type(name="Book")
class BookType:
    id: strawberry.ID = strawberry.field(name="_id")
    title: str | None
    is_booked: bool
    author_id: strawberry.Private[str | None]

    @strawberry.field
    async def author(self, info: strawberry.Info) -> AuthorType | None:
        if self.author_id is None:
            return None
        author = await info.context.facade.author(self.author_id)
        return AuthorType.from_model(author) if author else None

    @classmethod
    def from_model(cls, book: Book) -> "BookType":
        return cls(
            id=strawberry.ID(book.id),
            title=book.title,
            is_booked=book.is_booked,
            author_id=book.author_id,
        )


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID = strawberry.field(name="_id")
    username: str
    book_ids: strawberry.Private[list[str]]
    token: str | None = None

    @strawberry.field
    async def books(self, info: strawberry.Info) -> list[BookType]:
        books = await info.context.facade.books_by_ids(self.book_ids)
        return [BookType.from_model(book) for book in books]

    @classmethod
    def from_model(cls, user: User, token: str | None = None) -> "UserType":
        return cls(
            id=strawberry.ID(user.id),
            username=user.username,
            token=token,
            book_ids=list(user.book_ids),
        )


@strawberry.type(name="BookUpdateResponse")
class BookUpdateResponse:
    success: bool
    message: str | None
    books: list[BookType]

    @classmethod
    def from_model(cls, result: BookUpdateResult) -> "BookUpdateResponse":
        return cls(
            success=result.success,
            message=result.message,
            books=[BookType.from_model(book) for book in result.books],
        )


@strawberry.type
class Query:
    @strawberry.field
    async def books(self, info: strawberry.Info) -> list[BookType]:
        books = await info.context.facade.books()
        return [BookType.from_model(book) for book in books]

    @strawberry.field
    async def book(self, info: strawberry.Info, id: strawberry.ID) -> BookType | None:
        book = await info.context.facade.book(str(id))
        return BookType.from_model(book) if book else None

    @strawberry.field(description="The logged-in user, or null when not logged in")
    async def me(self, info: strawberry.Info) -> UserType | None:
        user = await info.context.facade.me(info.context.request)
        return UserType.from_model(user) if user else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def login(self, info: strawberry.Info, username: str, password: str) -> UserType:
        payload = await info.context.facade.login(username, password)
        return UserType.from_model(payload.user, token=payload.token)

    @strawberry.mutation
    async def borrow_books(self, info: strawberry.Info, ids: list[strawberry.ID]) -> BookUpdateResponse:
        result = await info.context.facade.borrow_books(
            [str(book_id) for book_id in ids], info.context.request
        )
        return BookUpdateResponse.from_model(result)

    @strawberry.mutation
    async def return_book(self, info: strawberry.Info, id: strawberry.ID) -> BookUpdateResponse:
        result = await info.context.facade.return_book(str(id), info.context.request)
        return BookUpdateResponse.from_model(result)


schema = strawberry.Schema(query=Query, mutation=Mutation)


def export_schema() -> str:
    """The schema in SDL form, for client code generators."""
    return schema.as_str()
