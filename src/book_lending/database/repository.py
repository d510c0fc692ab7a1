"""
Repository pattern base for the Book Lending service.

Repositories wrap SQLAlchemy queries and hand back Pydantic models, so the
lending engine and the façade never touch ORM objects directly. Reads use
``populate_existing`` because the engine writes with bulk ``UPDATE``
statements that bypass the session's identity map.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, desc, select
from sqlalchemy.orm import Session

from ..database.schema import Base
from ..database.session import safe_query

ModelType = TypeVar("ModelType", bound=Base)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class BaseRepository(ABC, Generic[ModelType, ResponseSchemaType]):
    """
    Abstract base repository providing common read operations.

    All queries go through ``safe_query`` so storage failures surface as
    ``RepositoryException``.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_db_obj(self, id: str) -> ModelType | None:
        query = (
            select(self.model_class)
            .where(self.model_class.id == str(id))
            .execution_options(populate_existing=True)
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"Failed to get {self.model_class.__name__} by ID",
        )

    def get_by_id(self, id: str) -> ResponseSchemaType | None:
        """
        Get entity by ID.

        Returns:
            Pydantic model or None if not found

        Raises:
            RepositoryException: On database errors
        """
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def get_all(self, order_by: str | None = None, order_desc: bool = False) -> list[ResponseSchemaType]:
        """
        Get all entities, optionally sorted by a column name.

        Raises:
            RepositoryException: On database errors
        """
        query = select(self.model_class).execution_options(populate_existing=True)

        if order_by and hasattr(self.model_class, order_by):
            order_field = getattr(self.model_class, order_by)
            query = query.order_by(desc(order_field) if order_desc else asc(order_field))

        results = safe_query(
            self.session, lambda s: s.execute(query).scalars().all(), "Failed to get all results"
        )
        return [self._to_response_model(item) for item in results]

