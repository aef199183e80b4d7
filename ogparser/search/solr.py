"""Solr client used to push scraped descriptions into the search index.

Updates are atomic field updates (``{"set": ...}``) committed immediately,
so a post becomes searchable by its description as soon as it is scraped.
"""

from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Optional

import httpx

from ogparser.config import settings
from ogparser.deadline import DeadlineExceeded, call_with_deadline

logger = logging.getLogger(__name__)


def build_description_update(item_id: int, description: str) -> list[dict]:
    """Return the JSON payload replacing ``post_description`` on one document."""
    return [{"id": item_id, "post_description": {"set": description}}]


class SolrIndex:
    """Thin wrapper around a Solr core's ``/update`` handler.

    Args:
        base_url: Core URL, e.g. ``http://localhost:8983/solr/posts``.  An
            empty string disables the index; updates become no-ops.
        timeout: Wall-clock budget per update in seconds.  Defaults to
            ``settings.index_timeout``.
        client: Optional shared :class:`httpx.Client`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = settings.index_timeout if timeout is None else timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    @property
    def update_url(self) -> str:
        return f"{self.base_url}/update?commit=true"

    def _post(self, client: httpx.Client, payload: list[dict]) -> httpx.Response:
        return client.post(
            self.update_url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def _send(self, payload: list[dict], cancelled: threading.Event) -> httpx.Response:
        if self._client is None:
            with httpx.Client() as client:
                return self._post(client, payload)
        return self._post(self._client, payload)

    def update_description(self, item_id: int, description: str) -> bool:
        """Replace the indexed description of document *item_id*.

        The request is abandoned once ``timeout`` seconds of wall-clock time
        have passed, whatever phase it is in.

        Returns:
            ``True`` when Solr answered with a 2xx status.  Transport errors,
            timeouts and error statuses are logged and reported as ``False``.
        """
        if not self.enabled:
            logger.debug("solr: no index configured, skipping post %d", item_id)
            return False

        payload = build_description_update(item_id, description)
        try:
            response = call_with_deadline(
                partial(self._send, payload),
                self.timeout,
                name=f"ogparser-solr-{item_id}",
            )
        except DeadlineExceeded:
            logger.warning("solr: update timed out for post %d", item_id)
            return False
        except httpx.HTTPError as exc:
            logger.warning("solr: update failed for post %d: %s", item_id, exc)
            return False

        if not response.is_success:
            logger.warning(
                "solr: HTTP %d updating post %d", response.status_code, item_id
            )
            return False
        return True
