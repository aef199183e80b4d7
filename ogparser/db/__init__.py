"""Database layer package.

Public re-exports so callers can write::

    from ogparser.db import get_connection, init_db
    from ogparser.db import posts, files
"""

from ogparser.db.connection import get_connection
from ogparser.db.migrations import init_db
from ogparser.db import files, posts

__all__ = ["get_connection", "init_db", "files", "posts"]
