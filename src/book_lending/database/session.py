"""
Database session management for the Book Lending service.

Sessions are short-lived: the façade opens one per operation through
``session_scope()`` and the lending engine commits once per book inside it.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .exceptions import RepositoryException, StoreConflictError
from .schema import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages database connections and sessions.

    Holds one engine and one session factory, creates the schema on demand
    and disposes of the connection pool on shutdown.
    """

    def __init__(self, database_url: str | None = None, echo: bool = False):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, the configured
                SQLite file is used.
            echo: Log every SQL statement.
        """
        if database_url is None:
            config = get_config()
            database_url = config.get_database_url()
            echo = echo or config.debug
            logger.info("Using SQLite database at: %s", config.database_path)

        self.database_url = database_url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite gets a single shared connection with foreign keys switched
        on; anything else gets a regular pool.
        """
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                self._engine = create_engine(
                    self.database_url,
                    # A single connection avoids "database is locked" errors
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                    echo=self.echo,
                )

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=self.echo,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,  # Keep objects usable after commit
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session. Callers must close it."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            book = session.get(Book, book_id)
        # Session is committed or rolled back, then closed
        ```
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.exception("Database error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and forget the session factory."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the global database manager instance.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603 - Singleton pattern for database manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def reset_db_manager() -> None:
    """Close and forget the global database manager."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Convenience context manager over the global database manager."""
    with get_db_manager().session_scope() as session:
        yield session


def _is_lock_error(error: OperationalError) -> bool:
    return "locked" in str(error.orig).lower()


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit a session, translating storage errors.

    Args:
        session: The database session
        operation: Description of the operation (for error messages)

    Raises:
        StoreConflictError: If a constraint or lock rejected the write
        RepositoryException: For any other database failure
    """
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise StoreConflictError(f"Database operation '{operation}' conflicted: {e.orig}") from e
    except OperationalError as e:
        session.rollback()
        if _is_lock_error(e):
            raise StoreConflictError(f"Database operation '{operation}' hit a lock") from e
        logger.exception("Commit failed for %s", operation)
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Commit failed for %s", operation)
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query[T](session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, translating storage errors.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Error message prefix

    Raises:
        StoreConflictError: If a constraint or lock rejected the statement
        RepositoryException: If the query fails for any other reason
    """
    try:
        return query_func(session)
    except IntegrityError as e:
        raise StoreConflictError(f"{error_msg}: {e.orig}") from e
    except OperationalError as e:
        if _is_lock_error(e):
            raise StoreConflictError(f"{error_msg}: database is locked") from e
        logger.exception("Query failed")
        raise RepositoryException(f"{error_msg}: Database query failed") from e
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise RepositoryException(f"{error_msg}: Database query failed") from e
