"""Database initialisation.

``init_db(conn)`` is idempotent — safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from ogparser.config import settings


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``posts`` and ``files`` tables and their indexes.

    Every DDL statement in ``schema.sql`` uses ``IF NOT EXISTS`` so calling
    this on a populated database changes nothing.

    Args:
        conn: An open, configured SQLite connection.
    """
    sql = settings.schema_path.read_text(encoding="utf-8")
    conn.executescript(sql)
