"""
Book model for the Book Lending service.

A book is either available or borrowed. The ``is_booked`` flag is the
catalog's view of that state; the identity store's borrowed-book table is
the other half, and the lending engine keeps the two in step.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

ID_PATTERN = r"^[0-9a-f]{24}$"


class Book(BaseModel):
    """Represents a book in the catalog."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "65f1c0a2b3d4e5f6a7b8c9d0",
                "title": "The Left Hand of Darkness",
                "is_booked": False,
                "author_id": "65f1c0a2b3d4e5f6a7b8c9aa",
            }
        },
    )

    id: str = Field(
        ...,
        description="Unique identifier of the book",
        pattern=ID_PATTERN,
    )

    title: str | None = Field(
        None,
        description="The title of the book",
        max_length=500,
    )

    is_booked: bool = Field(
        default=False,
        description="True while a user holds the book",
    )

    author_id: str | None = Field(
        None,
        description="Identifier of the book's author, if known",
        pattern=ID_PATTERN,
    )

    created_at: datetime | None = None
    updated_at: datetime | None = None
