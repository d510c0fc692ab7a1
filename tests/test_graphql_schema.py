"""
Tests for the GraphQL schema.

Queries run through ``schema.execute`` with a context built the way a
server would build it, from the request's ``Authorization`` header.
"""

from book_lending.api import export_schema, get_context, schema
from book_lending.auth import LOGIN_FAILED_MESSAGE

from .conftest import PASSWORD, assert_lending_invariant

LOGIN = """
mutation Login($username: String!, $password: String!) {
    login(username: $username, password: $password) {
        _id
        username
        token
    }
}
"""

BORROW = """
mutation Borrow($ids: [ID!]!) {
    borrowBooks(ids: $ids) {
        success
        message
        books { _id isBooked }
    }
}
"""

RETURN = """
mutation Return($id: ID!) {
    returnBook(id: $id) {
        success
        message
        books { _id isBooked }
    }
}
"""


async def execute(facade, query, variables=None, authorization=None):
    context = await get_context(facade, authorization)
    return await schema.execute(query, variable_values=variables, context_value=context)


async def login_token(facade, username):
    result = await execute(facade, LOGIN, {"username": username, "password": PASSWORD})
    assert result.errors is None
    return result.data["login"]["token"]


class TestQueries:
    async def test_books_with_authors(self, facade, catalog):
        result = await execute(facade, "{ books { _id title isBooked author { _id name } } }")

        assert result.errors is None
        books = {book["_id"]: book for book in result.data["books"]}
        assert set(books) == {*catalog.book_ids, catalog.orphan_book_id}
        assert books[catalog.book_ids[0]]["author"] == {
            "_id": catalog.author_id,
            "name": "Ursula K. Le Guin",
        }
        assert books[catalog.orphan_book_id]["author"] is None
        assert all(book["isBooked"] is False for book in books.values())

    async def test_book_with_author_books(self, facade, catalog):
        result = await execute(
            facade,
            "query Book($id: ID!) { book(id: $id) { title author { books { _id } } } }",
            {"id": catalog.book_ids[0]},
        )

        assert result.errors is None
        book = result.data["book"]
        assert book["title"] == "A Wizard of Earthsea"
        assert {b["_id"] for b in book["author"]["books"]} == set(catalog.book_ids)

    async def test_unknown_book_is_null(self, facade, catalog):
        result = await execute(facade, '{ book(id: "000000000000000000000000") { _id } }')

        assert result.errors is None
        assert result.data["book"] is None

    async def test_me_anonymous_is_null(self, facade, catalog):
        result = await execute(facade, "{ me { _id } }")

        assert result.errors is None
        assert result.data["me"] is None

    async def test_me_with_token(self, facade, catalog):
        token = await login_token(facade, "alice")

        result = await execute(facade, "{ me { _id username books { _id } } }", authorization=token)

        assert result.errors is None
        assert result.data["me"] == {"_id": catalog.alice.id, "username": "alice", "books": []}


class TestMutations:
    async def test_login_returns_token(self, facade, catalog):
        result = await execute(facade, LOGIN, {"username": "alice", "password": PASSWORD})

        assert result.errors is None
        assert result.data["login"]["_id"] == catalog.alice.id
        assert result.data["login"]["token"].startswith("Bearer ")

    async def test_failed_login_is_an_error(self, facade, catalog):
        result = await execute(facade, LOGIN, {"username": "alice", "password": "nope"})

        assert result.data is None
        assert [error.message for error in result.errors] == [LOGIN_FAILED_MESSAGE]

    async def test_borrow_then_return(self, facade, session, catalog):
        token = await login_token(facade, "alice")
        book_id = catalog.book_ids[0]

        borrowed = await execute(facade, BORROW, {"ids": [book_id]}, authorization=token)

        assert borrowed.errors is None
        assert borrowed.data["borrowBooks"]["success"] is True
        assert borrowed.data["borrowBooks"]["books"] == [{"_id": book_id, "isBooked": True}]

        me = await execute(facade, "{ me { books { _id } } }", authorization=token)
        assert me.data["me"]["books"] == [{"_id": book_id}]

        returned = await execute(facade, RETURN, {"id": book_id}, authorization=token)

        assert returned.errors is None
        assert returned.data["returnBook"]["success"] is True
        assert returned.data["returnBook"]["books"] == [{"_id": book_id, "isBooked": False}]
        assert_lending_invariant(session)

    async def test_anonymous_borrow_is_a_failure_not_an_error(self, facade, catalog):
        result = await execute(facade, BORROW, {"ids": catalog.book_ids})

        assert result.errors is None
        assert result.data["borrowBooks"]["success"] is False
        assert result.data["borrowBooks"]["books"] == []

    async def test_partial_borrow(self, facade, session, catalog):
        alice = await login_token(facade, "alice")
        bob = await login_token(facade, "bob")
        x, y = catalog.book_ids[0], catalog.book_ids[1]
        await execute(facade, BORROW, {"ids": [y]}, authorization=bob)

        result = await execute(facade, BORROW, {"ids": [x, y]}, authorization=alice)

        payload = result.data["borrowBooks"]
        assert payload["success"] is False
        assert y in payload["message"]
        assert [book["_id"] for book in payload["books"]] == [x]
        assert_lending_invariant(session)


def test_exported_schema():
    sdl = export_schema()

    assert "borrowBooks(ids: [ID!]!): BookUpdateResponse!" in sdl
    assert "returnBook(id: ID!): BookUpdateResponse!" in sdl
    assert "_id: ID!" in sdl
    assert "isBooked: Boolean!" in sdl
