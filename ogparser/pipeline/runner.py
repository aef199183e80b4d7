"""Run-level driver: bootstrap, a single run, and the recurring schedule.

:func:`run_once` is the one place where run-level errors are handled.
Everything below it either returns normally or raises
:class:`~ogparser.exceptions.BootstrapError`.
"""

from __future__ import annotations

import sqlite3
import threading
from functools import partial
from typing import Callable, Optional

import httpx
import structlog

from ogparser.config import Settings, settings as default_settings
from ogparser.db.connection import get_connection
from ogparser.db.migrations import init_db
from ogparser.db.posts import list_recent_posts
from ogparser.exceptions import BootstrapError, OgParserError
from ogparser.pipeline.orchestrator import FETCH_LIMITS, BatchReport, process_batch
from ogparser.scraper.fetcher import fetch_item
from ogparser.search.solr import SolrIndex

logger = structlog.get_logger(__name__)


def bootstrap(cfg: Settings) -> sqlite3.Connection:
    """Open the primary store, make sure it answers and has the schema.

    Raises:
        BootstrapError: If the database cannot be opened or initialised.
    """
    conn: Optional[sqlite3.Connection] = None
    try:
        conn = get_connection(cfg.db_path)
        conn.execute("SELECT 1").fetchone()
        init_db(conn)
    except (sqlite3.Error, OSError) as exc:
        if conn is not None:
            conn.close()
        raise BootstrapError(f"opening database {cfg.db_path}: {exc}") from exc

    logger.info("opened database connection", db_path=str(cfg.db_path))
    return conn


def _run(cfg: Settings) -> BatchReport:
    conn = bootstrap(cfg)
    try:
        try:
            items = list_recent_posts(conn, cfg.scrape_window_minutes)
        except sqlite3.Error as exc:
            raise BootstrapError(f"fetching posts to scrape: {exc}") from exc

        logger.info("selected posts", count=len(items), window_minutes=cfg.scrape_window_minutes)

        with httpx.Client(limits=FETCH_LIMITS) as client:
            fetch = partial(
                fetch_item,
                client=client,
                timeout=cfg.fetch_timeout,
                user_agent=cfg.user_agent,
                overrides=cfg.user_agent_overrides,
            )
            index = SolrIndex(cfg.solr_url, timeout=cfg.index_timeout, client=client)
            return process_batch(
                conn, index, items, fetch=fetch, max_workers=cfg.worker_limit
            )
    finally:
        conn.close()
        logger.info("closed database connection")


def run_once(cfg: Optional[Settings] = None) -> Optional[BatchReport]:
    """Run the pipeline once over the current selection window.

    Returns:
        The :class:`BatchReport`, or ``None`` if the run could not start.
    """
    cfg = cfg or default_settings
    try:
        report = _run(cfg)
    except OgParserError as exc:
        logger.error("run aborted", error=str(exc))
        return None

    logger.info(
        "run finished",
        total=report.total,
        fetched=report.fetched,
        eligible=report.eligible,
        updated=report.updated,
    )
    return report


def run_forever(
    cfg: Optional[Settings] = None,
    *,
    stop_event: Optional[threading.Event] = None,
    run: Callable[[Settings], Optional[BatchReport]] = run_once,
) -> int:
    """Run immediately, then every ``cfg.schedule_interval`` seconds.

    Args:
        cfg: Settings; defaults to the module-level singleton.
        stop_event: Set it to stop after the current run.  Without one the
            loop only ends on ``KeyboardInterrupt``.
        run: The per-run callable.

    Returns:
        The number of runs performed.
    """
    cfg = cfg or default_settings
    stop_event = stop_event or threading.Event()

    runs = 0
    logger.info("starting schedule", interval_seconds=cfg.schedule_interval)
    while True:
        run(cfg)
        runs += 1
        if stop_event.wait(cfg.schedule_interval):
            break

    logger.info("schedule stopped", runs=runs)
    return runs
