"""Exceptions raised by the storage layer."""


class RepositoryException(Exception):
    """Base exception for repository operations.

    Raised directly for failures the caller cannot recover from, such as an
    unreachable database.
    """


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class StoreConflictError(RepositoryException):
    """Raised when a concurrent write won the race for the same row."""
