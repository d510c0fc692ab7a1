"""
Sample data for the Book Lending service.

Generates a small, repeatable catalog with Faker: authors, their books,
and a handful of users who all share one known password so the sample
data can be logged into straight away. Every book starts out available.
"""

import logging
import random
from dataclasses import dataclass, field

from faker import Faker
from sqlalchemy.orm import Session

from .author_repository import AuthorCreateSchema, AuthorRepository
from .book_repository import BookCreateSchema, BookRepository
from .user_repository import UserCreateSchema, UserRepository

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "lend-me-a-book"  # noqa: S105


@dataclass
class SeedSummary:
    """Ids created by ``seed_database``."""

    author_ids: list[str] = field(default_factory=list)
    book_ids: list[str] = field(default_factory=list)
    usernames: list[str] = field(default_factory=list)


def seed_database(
    session: Session,
    num_authors: int = 5,
    books_per_author: int = 3,
    num_users: int = 3,
    seed: int = 42,
) -> SeedSummary:
    """Populate an empty database with sample authors, books and users."""
    fake = Faker()
    Faker.seed(seed)
    rng = random.Random(seed)

    authors = AuthorRepository(session)
    books = BookRepository(session)
    users = UserRepository(session)
    summary = SeedSummary()

    for _ in range(num_authors):
        author = authors.create_author(AuthorCreateSchema(name=fake.name()))
        summary.author_ids.append(author.id)

        for _ in range(rng.randint(1, books_per_author)):
            title = fake.catch_phrase().title()
            book = books.create_book(BookCreateSchema(title=title, author_id=author.id))
            summary.book_ids.append(book.id)

    # A few books without a known author
    for _ in range(2):
        book = books.create_book(BookCreateSchema(title=fake.sentence(nb_words=3).rstrip(".")))
        summary.book_ids.append(book.id)

    seen: set[str] = set()
    while len(summary.usernames) < num_users:
        username = fake.user_name()
        if username in seen:
            continue
        seen.add(username)
        users.create_user(UserCreateSchema(username=username, password=SAMPLE_PASSWORD))
        summary.usernames.append(username)

    logger.info(
        "Seeded %d authors, %d books, %d users",
        len(summary.author_ids),
        len(summary.book_ids),
        len(summary.usernames),
    )
    return summary
