"""
Table-scoped SQLite helpers shared by repositories.

A repository wraps one table (``table`` class attribute) and an open
connection owned by the caller, normally the ``with`` block of
``get_connection()``. Repositories take and return Pydantic models; the SQL
stays explicit in their methods.

The ``where`` fragments passed to ``count()`` / ``delete()`` are written by
repository code only, never built from user input. Values always go through
``params``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, ClassVar, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Helpers for a single table.

    Attributes:
        table: Table this repository reads and writes.
        conn: The active ``sqlite3.Connection``.
    """

    table: ClassVar[str] = ""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("SQL [%s]: %s | params: %s", self.table, " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def count(self, where: str = "", params: Params = ()) -> int:
        """``COUNT(*)`` over ``table``, optionally restricted by ``where``."""
        row = self.fetchone(f"SELECT COUNT(*) FROM {self.table}{_where(where)};", params)
        return int(row[0]) if row is not None else 0

    def delete(self, where: str = "", params: Params = ()) -> int:
        """Delete matching rows; returns the count taken just before the delete."""
        removed = self.count(where, params)
        if removed:
            self.execute(f"DELETE FROM {self.table}{_where(where)};", params)
        return removed


def _where(clause: str) -> str:
    return f" WHERE {clause}" if clause else ""
