"""Concurrent fetch fan-out followed by a sequential extract/update pass.

One fetch task is started per item.  Each task hands its result to a queue
sized to the batch (so a producer never blocks) and then signals a
per-run :class:`CountdownLatch`.  Once every task has signalled, the results
are drained in arrival order and processed one at a time on the calling
thread, which is the only thread that touches the database connection.
"""

from __future__ import annotations

import logging
import queue
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, Optional

import httpx

from ogparser.pipeline.latch import CountdownLatch
from ogparser.pipeline.updater import apply_update
from ogparser.scraper.extractor import extract_preview_metadata
from ogparser.scraper.fetcher import fetch_item
from ogparser.scraper.models import FetchResult, Item, ScrapedItem
from ogparser.search.solr import SolrIndex

logger = logging.getLogger(__name__)

FetchFn = Callable[[Item], FetchResult]

# No connection cap: the fetch pool decides how many requests are in flight.
FETCH_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


@dataclass
class BatchReport:
    """Counters describing one pass over a batch."""

    total: int = 0
    fetched: int = 0
    eligible: int = 0
    updated: int = 0


# ---------------------------------------------------------------------------
# Fan-out / fan-in
# ---------------------------------------------------------------------------

def _fetch_and_signal(
    fetch: FetchFn,
    item: Item,
    results: queue.Queue,
    latch: CountdownLatch,
) -> None:
    """Run *fetch* for one item; always enqueue a result and signal once."""
    result = FetchResult(item=item)
    try:
        result = fetch(item)
    except Exception:  # noqa: BLE001
        logger.exception("orchestrator: fetch task crashed for %s", item.url)
    finally:
        results.put_nowait(result)
        latch.count_down()


def collect_fetch_results(
    items: Iterable[Item],
    fetch: FetchFn,
    *,
    max_workers: Optional[int] = None,
) -> list[FetchResult]:
    """Fetch every item concurrently and return one result per item.

    Args:
        items: The batch.  It is materialised once and never changes.
        fetch: Called once per item from a worker thread.
        max_workers: Cap on concurrent fetches.  ``None`` starts one worker
            per item.

    Returns:
        Exactly ``len(items)`` results, in completion order.
    """
    batch = tuple(items)
    if not batch:
        return []

    latch = CountdownLatch(len(batch))
    results: queue.Queue = queue.Queue(maxsize=len(batch))
    workers = min(max_workers, len(batch)) if max_workers else len(batch)

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ogparser-fetch")
    try:
        for item in batch:
            pool.submit(_fetch_and_signal, fetch, item, results, latch)
        latch.wait()
    finally:
        # No task can enqueue after this point.
        pool.shutdown(wait=True)

    logger.info("orchestrator: finished fetching %d post(s)", len(batch))
    return [results.get_nowait() for _ in batch]


# ---------------------------------------------------------------------------
# Sequential phase
# ---------------------------------------------------------------------------

def scrape(result: FetchResult) -> ScrapedItem:
    """Run extraction on a fetched page."""
    return ScrapedItem(
        item=result.item,
        body=result.body,
        metadata=extract_preview_metadata(result.body),
    )


def process_batch(
    conn: sqlite3.Connection,
    index: SolrIndex,
    items: Iterable[Item],
    *,
    fetch: Optional[FetchFn] = None,
    max_workers: Optional[int] = None,
) -> BatchReport:
    """Fetch, extract and persist one batch of posts.

    Items whose page yielded both an ``og:description`` and an ``og:image``
    are handed to :func:`~ogparser.pipeline.updater.apply_update`; all
    others are skipped.

    Args:
        conn: Primary store connection, used only from this thread.
        index: Search index client.
        items: Posts to process.
        fetch: Fetch function; defaults to :func:`fetch_item` on a shared
            client built for this batch.
        max_workers: See :func:`collect_fetch_results`.
    """
    batch = tuple(items)
    report = BatchReport(total=len(batch))
    if not batch:
        logger.info("orchestrator: nothing to scrape")
        return report

    if fetch is None:
        with httpx.Client(limits=FETCH_LIMITS) as client:
            results = collect_fetch_results(
                batch, partial(fetch_item, client=client), max_workers=max_workers
            )
    else:
        results = collect_fetch_results(batch, fetch, max_workers=max_workers)

    for result in results:
        if result.ok:
            report.fetched += 1

        logger.debug("orchestrator: parsing html returned from %s", result.item.url)
        scraped = scrape(result)
        if not scraped.is_eligible:
            continue

        report.eligible += 1
        if apply_update(conn, index, scraped):
            report.updated += 1

    return report
