"""Bounded-time HTTP fetcher for post pages.

Every failure mode (transport error, timeout, non-2xx status, bad URL)
collapses into a :class:`FetchResult` with an empty body.  No exception
escapes :func:`fetch_item` and nothing is retried.
"""

from __future__ import annotations

import logging
import threading
import urllib.parse
from functools import partial
from typing import Mapping, Optional

import httpx

from ogparser.config import settings
from ogparser.deadline import DeadlineExceeded, call_with_deadline
from ogparser.scraper.models import FetchResult, Item

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request shaping
# ---------------------------------------------------------------------------

def _host_matches(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


def user_agent_for(
    url: str,
    default: Optional[str] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the ``User-Agent`` to send when fetching *url*.

    *overrides* maps a host suffix to a header value.  ``example.com``
    matches ``example.com`` and ``blog.example.com`` but not
    ``notexample.com``.  When no suffix matches, *default* is used.

    Args:
        url: Target URL.
        default: Fallback header value.  Defaults to ``settings.user_agent``.
        overrides: Host-suffix table.  Defaults to
            ``settings.user_agent_overrides``.
    """
    if default is None:
        default = settings.user_agent
    if overrides is None:
        overrides = settings.user_agent_overrides

    host = urllib.parse.urlsplit(url).hostname or ""
    for suffix, value in overrides.items():
        if _host_matches(host, suffix.lower()):
            return value
    return default


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------

def _read_body(
    client: httpx.Client,
    url: str,
    headers: dict[str, str],
    timeout: float,
    cancelled: threading.Event,
) -> str:
    """GET *url* and return the decoded body, or ``""`` for a non-2xx status."""
    with client.stream(
        "GET",
        url,
        headers=headers,
        timeout=timeout,
        follow_redirects=True,
    ) as response:
        if not response.is_success:
            logger.info("fetcher: HTTP %d for %s", response.status_code, url)
            return ""

        chunks: list[bytes] = []
        for chunk in response.iter_bytes():
            if cancelled.is_set():
                return ""
            chunks.append(chunk)

        encoding = response.encoding or "utf-8"

    return b"".join(chunks).decode(encoding, errors="replace")


def _download(
    client: Optional[httpx.Client],
    url: str,
    headers: dict[str, str],
    timeout: float,
    cancelled: threading.Event,
) -> str:
    if client is None:
        with httpx.Client() as own_client:
            return _read_body(own_client, url, headers, timeout, cancelled)
    return _read_body(client, url, headers, timeout, cancelled)


def fetch_item(
    item: Item,
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
    user_agent: Optional[str] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> FetchResult:
    """Fetch the page behind *item* and return a :class:`FetchResult`.

    The whole request (connect and transfer) must finish within *timeout*
    seconds of wall-clock time.  A single ``User-Agent`` header is sent,
    chosen by :func:`user_agent_for`.

    Args:
        item: The post to fetch.
        client: Shared :class:`httpx.Client`.  A short-lived client is
            created when omitted.
        timeout: Total time budget in seconds.  Defaults to
            ``settings.fetch_timeout``.
        user_agent: Default header value, see :func:`user_agent_for`.
        overrides: Host-suffix header overrides, see :func:`user_agent_for`.

    Returns:
        A :class:`FetchResult`; its body is empty when the fetch failed.
    """
    if timeout is None:
        timeout = settings.fetch_timeout

    logger.info("fetcher: fetching %s", item.url)

    body = ""
    try:
        headers = {"User-Agent": user_agent_for(item.url, user_agent, overrides)}
        body = call_with_deadline(
            partial(_download, client, item.url, headers, timeout),
            timeout,
            name=f"ogparser-fetch-{item.id}",
        )
    except (httpx.TimeoutException, DeadlineExceeded):
        logger.warning("fetcher: timeout fetching %s", item.url)
    except (httpx.InvalidURL, ValueError) as exc:
        logger.warning("fetcher: invalid url %r: %s", item.url, exc)
    except httpx.HTTPError as exc:
        logger.warning("fetcher: request error for %s: %s", item.url, exc)

    return FetchResult(item=item, body=body)
