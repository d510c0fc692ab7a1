"""
Author model for the Book Lending service.

An author's books are not stored on the author: they are derived on read
from the books whose ``author_id`` points at the author.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .book import ID_PATTERN


class Author(BaseModel):
    """Represents a book author."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(
        ...,
        description="Unique identifier of the author",
        pattern=ID_PATTERN,
    )

    name: str | None = Field(
        None,
        description="Author's display name",
        max_length=200,
    )

    created_at: datetime | None = None
    updated_at: datetime | None = None
