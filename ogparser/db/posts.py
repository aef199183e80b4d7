"""Queries against the ``posts`` table."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from ogparser.db.models import Post
from ogparser.scraper.models import Item

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format *moment* (default: now) as a UTC ``YYYY-MM-DD HH:MM:SS`` string."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def _row_to_post(row: sqlite3.Row) -> Post:
    return Post(
        id=row["pk_post_id"],
        link=row["link"],
        description=row["description"],
        content=row["content"],
        created=row["created"],
        modified=row["modified"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def list_recent_posts(conn: sqlite3.Connection, window_minutes: int = 60) -> list[Item]:
    """Return the posts created within the last *window_minutes* as items.

    ``created`` is stored as UTC text, so the comparison is lexical against
    a cutoff computed by SQLite in the same format.
    """
    rows = conn.execute(
        """
        SELECT pk_post_id, link FROM posts
        WHERE created > strftime('%Y-%m-%d %H:%M:%S', 'now', ?)
        ORDER BY pk_post_id
        """,
        (f"-{int(window_minutes)} minutes",),
    ).fetchall()
    return [Item(id=row["pk_post_id"], url=row["link"]) for row in rows]


def insert_post(
    conn: sqlite3.Connection,
    link: str,
    created: Optional[datetime] = None,
) -> int:
    """Insert a new post and return its primary key.

    Args:
        conn: Open DB connection.
        link: External URL of the post.
        created: Creation time; defaults to now.
    """
    with conn:
        cursor = conn.execute(
            "INSERT INTO posts (link, created) VALUES (?, ?)",
            (link, utc_timestamp(created)),
        )
    return int(cursor.lastrowid)


def get_post(conn: sqlite3.Connection, post_id: int) -> Optional[Post]:
    """Fetch a single post by primary key.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM posts WHERE pk_post_id = ?", (post_id,)
    ).fetchone()
    return _row_to_post(row) if row else None


def update_post_preview(
    conn: sqlite3.Connection,
    post_id: int,
    *,
    description: str,
    content: str,
    modified: str,
) -> None:
    """Store the scraped description and page body on a post.

    Raises:
        sqlite3.Error: If the statement fails.
    """
    with conn:
        conn.execute(
            "UPDATE posts SET description = ?, modified = ?, content = ? WHERE pk_post_id = ?",
            (description, modified, content, post_id),
        )
