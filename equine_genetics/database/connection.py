"""Database connection management for equine_genetics."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..exceptions import DatabaseError

MEMORY_DB = ':memory:'


def get_db_connection(db_path: str) -> sqlite3.Connection:
    """
    Get a database connection with foreign keys enabled.

    The connection runs in autocommit mode; writes are grouped with
    ``transaction``.

    Args:
        db_path: Path to SQLite database file, or ':memory:'

    Returns:
        SQLite connection with foreign keys enabled and Row results

    Raises:
        DatabaseError: If connection fails
    """
    try:
        if db_path != MEMORY_DB:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path, isolation_level=None, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn
    except sqlite3.Error as e:
        raise DatabaseError(f"Failed to connect to database at {db_path}: {e}") from e


def create_database(db_path: str) -> sqlite3.Connection:
    """
    Create a new database with schema.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection to the new database

    Raises:
        DatabaseError: If database creation fails
    """
    from .schema import create_schema

    conn = get_db_connection(db_path)
    create_schema(conn)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection, immediate: bool = False) -> Iterator[sqlite3.Cursor]:
    """
    Run a block of statements as one transaction.

    With immediate=True the write lock is taken up front (BEGIN IMMEDIATE),
    so two writers updating the same animal serialize instead of interleaving
    their read-modify-write cycles.

    Args:
        conn: Connection opened by get_db_connection
        immediate: Acquire the write lock at BEGIN

    Yields:
        Cursor bound to the transaction

    Raises:
        DatabaseError: If any statement fails; the transaction is rolled back
    """
    cursor = conn.cursor()
    try:
        cursor.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    except sqlite3.Error as e:
        raise DatabaseError(f"Failed to begin transaction: {e}") from e
    try:
        yield cursor
    except sqlite3.Error as e:
        conn.rollback()
        raise DatabaseError(f"Database operation failed: {e}") from e
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
