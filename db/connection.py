"""
db/connection.py
----------------
PostgreSQL connection pool plus a ``transaction`` helper that hands out a
cursor and takes care of commit, rollback and returning the connection.
"""

from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2 import pool
from psycopg2.extensions import cursor as Cursor

from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.SimpleConnectionPool | None = None


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> None:
    """
    Open the shared connection pool (no-op if already open).

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.SimpleConnectionPool(min_conn, max_conn, DATABASE_URL)
        logger.info(f"Connection pool ready ({min_conn}-{max_conn} connections).")
    except psycopg2.OperationalError as e:
        logger.error(f"Could not reach the database: {e}")
        raise


def close_pool() -> None:
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Connection pool closed.")


@contextmanager
def transaction(action: str) -> Iterator[Cursor]:
    """
    Run one unit of work on a pooled connection.

    Commits when the block finishes, rolls back and re-raises on error.

    Args:
        action: Short description used in the failure log line,
            e.g. ``"update obligation #3"``.

    Raises:
        RuntimeError: If the pool has not been initialized.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    conn = _pool.getconn()
    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise
    finally:
        _pool.putconn(conn)
