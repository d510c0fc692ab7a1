"""External operation surface: the façade and its GraphQL schema."""

from .facade import LendingFacade
from .schema import GraphQLContext, export_schema, get_context, schema

__all__ = [
    "GraphQLContext",
    "LendingFacade",
    "export_schema",
    "get_context",
    "schema",
]
