"""
DDL for the analysis cache store.

One table, ``analysis_cache``: a row per cache key (task + canonical filter
JSON) holding the JSON-encoded result rows and ISO 8601 UTC timestamps. The
timestamps are fixed-width, so ``expires_at <= ?`` compares chronologically.

Every statement is ``IF NOT EXISTS``; ``apply_schema()`` runs on each
``init-db`` and on the first use of a ``SQLiteCacheBackend``.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS analysis_cache (
        cache_key    TEXT    PRIMARY KEY,
        task_type    TEXT    NOT NULL,
        filters_json TEXT    NOT NULL DEFAULT '{}',
        payload_json TEXT    NOT NULL,
        created_at   TEXT    NOT NULL,
        expires_at   TEXT    NOT NULL
    )
    """,
    # clear_expired() and stats() scan by expiry
    "CREATE INDEX IF NOT EXISTS idx_analysis_cache_expires ON analysis_cache (expires_at)",
    "CREATE INDEX IF NOT EXISTS idx_analysis_cache_task ON analysis_cache (task_type)",
)

ALL_TABLE_NAMES = ["analysis_cache"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create the cache table and its indexes if missing."""
    for statement in SCHEMA_STATEMENTS:
        conn.execute(statement)
    conn.commit()
    logger.debug("Cache schema verified (%d statements)", len(SCHEMA_STATEMENTS))


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    return _master_names(conn, "table")


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    return _master_names(conn, "index")


def _master_names(conn: sqlite3.Connection, kind: str) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = ? ORDER BY name;", (kind,)
    ).fetchall()
    return [row[0] for row in rows]
