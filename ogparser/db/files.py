"""Queries against the ``files`` table (one image record per post)."""

from __future__ import annotations

import sqlite3

from ogparser.db.models import PostFile


def count_files_for_post(conn: sqlite3.Connection, post_id: int) -> int:
    """Return how many image records reference *post_id*."""
    row = conn.execute(
        "SELECT COUNT(*) AS ttl FROM files WHERE fk_post_id = ?", (post_id,)
    ).fetchone()
    return int(row["ttl"]) if row else 0


def insert_file(conn: sqlite3.Connection, post_id: int, external_url: str) -> int:
    """Attach an external image URL to a post and return the new row id."""
    with conn:
        cursor = conn.execute(
            "INSERT INTO files (fk_post_id, external_url) VALUES (?, ?)",
            (post_id, external_url),
        )
    return int(cursor.lastrowid)


def list_files_for_post(conn: sqlite3.Connection, post_id: int) -> list[PostFile]:
    """Return the image records attached to *post_id*, oldest first."""
    rows = conn.execute(
        "SELECT * FROM files WHERE fk_post_id = ? ORDER BY pk_file_id", (post_id,)
    ).fetchall()
    return [
        PostFile(id=r["pk_file_id"], post_id=r["fk_post_id"], external_url=r["external_url"])
        for r in rows
    ]
