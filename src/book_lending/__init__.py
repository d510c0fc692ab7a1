"""
Book Lending service.

A small lending backend over a catalog of books and authors:

- models: Pydantic records returned by every layer
- database: SQLAlchemy schema, sessions and the catalog/identity stores
- auth: bearer tokens and the per-request authorization gate
- lending: the borrow/return engine
- api: the query/mutation façade and its strawberry GraphQL schema
"""

__version__ = "0.1.0"
