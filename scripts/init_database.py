#!/usr/bin/env python3
"""
Initialize the Book Lending database.

This script:
1. Creates all database tables
2. Optionally loads sample data
3. Optionally prints the GraphQL schema

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data] [--print-schema]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from book_lending.api.schema import export_schema
from book_lending.config import configure_logging
from book_lending.database import get_db_manager
from book_lending.database.exceptions import RepositoryException
from book_lending.database.seed import SAMPLE_PASSWORD, seed_database
from book_lending.observability import initialize_observability

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"authors", "books", "users", "borrowed_books"}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Book Lending database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load sample data after creating tables",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )
    parser.add_argument(
        "--print-schema",
        action="store_true",
        help="Print the GraphQL schema (SDL) to stdout",
    )
    args = parser.parse_args(argv)

    configure_logging()
    initialize_observability()

    db_manager = get_db_manager(args.database_url)
    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        return 1

    try:
        db_manager.init_database(drop_existing=args.drop_existing)

        tables = set(inspect(db_manager.engine).get_table_names())
        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", sorted(missing_tables))
            return 1

        if args.sample_data:
            with db_manager.session_scope() as session:
                summary = seed_database(session)
            logger.info(
                "Sample users %s can log in with password %r",
                ", ".join(summary.usernames),
                SAMPLE_PASSWORD,
            )
    except RepositoryException:
        logger.exception("Database initialization failed")
        return 1
    finally:
        db_manager.close()

    if args.print_schema:
        print(export_schema())

    logger.info("Database initialization complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
