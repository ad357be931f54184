"""
SQLite connections for the analysis cache store.

The cache table is the only persistent state in the package. Each connection
covers one short unit of work (a lookup, an upsert, a purge) and:
  - runs in WAL mode, so ``cache-stats`` can read while ``batch`` writes;
  - waits ``busy_timeout_ms`` on a locked database before failing;
  - returns ``sqlite3.Row`` rows;
  - commits when the block exits cleanly and rolls back otherwise.

Usage::

    from game_analytics.db.connection import open_cache_db

    with open_cache_db(config.database) as conn:
        AnalysisCacheRepository(conn).count_total()
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator, Optional

from game_analytics.db.schema import apply_schema

if TYPE_CHECKING:
    from game_analytics.config import DatabaseConfig

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Yield a configured connection to ``db_path``.

    Parent directories of a file database are created on demand.

    Raises:
        OSError: If the parent directory cannot be created.
        sqlite3.OperationalError: If the file cannot be opened or stays locked.
    """
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    try:
        _set_pragmas(conn, db_path, wal_mode, busy_timeout_ms)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def open_cache_db(
    database: "DatabaseConfig",
    db_path: Optional[str] = None,
) -> Generator[sqlite3.Connection, None, None]:
    """``get_connection()`` using ``[database]`` settings, with the schema applied.

    Args:
        database: The ``[database]`` config section.
        db_path: Overrides ``database.db_path`` (``init-db --db-path``).
    """
    with get_connection(
        db_path or database.db_path,
        wal_mode=database.wal_mode,
        busy_timeout_ms=database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        yield conn


def _set_pragmas(
    conn: sqlite3.Connection, db_path: str, wal_mode: bool, busy_timeout_ms: int
) -> None:
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    if not wal_mode:
        return
    mode = conn.execute("PRAGMA journal_mode = WAL;").fetchone()[0]
    if str(mode).lower() != "wal":
        # In-memory databases report "memory".
        logger.debug("journal_mode for %s is %s, not WAL", db_path, mode)
