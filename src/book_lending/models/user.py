"""
User model for the Book Lending service.

The password hash lives only in the database layer. Nothing built from
this model can leak it.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .book import ID_PATTERN


class User(BaseModel):
    """A registered user and the books they currently hold."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(
        ...,
        description="Unique identifier of the user",
        pattern=ID_PATTERN,
    )

    username: str = Field(
        ...,
        description="Unique login name",
        min_length=1,
        max_length=100,
    )

    book_ids: list[str] = Field(
        default_factory=list,
        description="Identifiers of the books this user has borrowed",
    )

    created_at: datetime | None = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be blank")
        return v
