"""Writes an eligible :class:`ScrapedItem` to the store and the search index.

The two writes are independent and best-effort: a failed store update does
not stop the index update, and neither is retried.
"""

from __future__ import annotations

import logging
import sqlite3

from ogparser.db.files import count_files_for_post, insert_file
from ogparser.db.posts import update_post_preview, utc_timestamp
from ogparser.scraper.models import ScrapedItem
from ogparser.search.solr import SolrIndex

logger = logging.getLogger(__name__)


def update_store(conn: sqlite3.Connection, scraped: ScrapedItem) -> bool:
    """Save description, page body and image for one post.

    The image record is only inserted when the post has none yet, so posts
    that stay inside the selection window across runs keep a single image.

    Returns:
        ``True`` if every statement succeeded.
    """
    post_id = scraped.item.id
    try:
        update_post_preview(
            conn,
            post_id,
            description=scraped.metadata.description,
            content=scraped.body,
            modified=utc_timestamp(),
        )
    except sqlite3.Error as exc:
        logger.error("updater: could not update post %s: %s", scraped.item.url, exc)
        return False

    try:
        if count_files_for_post(conn, post_id) == 0:
            insert_file(conn, post_id, scraped.metadata.featured_image)
    except sqlite3.Error as exc:
        logger.error("updater: could not store image for %s: %s", scraped.item.url, exc)
        return False

    return True


def apply_update(
    conn: sqlite3.Connection,
    index: SolrIndex,
    scraped: ScrapedItem,
) -> bool:
    """Persist *scraped* to the primary store, then push it to the index.

    The index update is attempted whatever the store outcome.

    Returns:
        The store outcome (see :func:`update_store`).
    """
    logger.info("updater: updating OG tags parsed from %s", scraped.item.url)
    stored = update_store(conn, scraped)
    index.update_description(scraped.item.id, scraped.metadata.description)
    return stored
