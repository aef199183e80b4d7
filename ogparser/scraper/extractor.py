"""Open Graph extraction: turns an HTML document into :class:`PreviewMetadata`.

The document is tokenised in a single forward pass with the stdlib
:class:`html.parser.HTMLParser`.  No tree is built and nothing the page
references (images, scripts, stylesheets) is ever fetched.
"""

from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import Optional

from ogparser.scraper.models import PreviewMetadata

logger = logging.getLogger(__name__)

DESCRIPTION_PROPERTIES: frozenset[str] = frozenset({"og:description"})
IMAGE_PROPERTIES: frozenset[str] = frozenset({"og:image"})


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class _MetaTagScanner(HTMLParser):
    """Collects ``og:description`` / ``og:image`` values from ``<meta>`` tags.

    Flags are scoped to a single element.  Every matching ``content``
    attribute is an unconditional assignment, so the last matching tag in
    the document wins.
    """

    def __init__(self) -> None:
        super().__init__()
        self.metadata = PreviewMetadata()

    def handle_starttag(self, tag: str, attrs: list[tuple[str, Optional[str]]]) -> None:
        if tag != "meta":
            return

        is_description = False
        is_image = False
        for key, value in attrs:
            if key != "property":
                continue
            if value in DESCRIPTION_PROPERTIES:
                is_description = True
                break
            if value in IMAGE_PROPERTIES:
                is_image = True
                break

        if not (is_description or is_image):
            return

        for key, value in attrs:
            if key != "content":
                continue
            if is_description:
                self.metadata.description = value or ""
            else:
                self.metadata.featured_image = value or ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_preview_metadata(html: str) -> PreviewMetadata:
    """Return the Open Graph description and image found in *html*.

    Empty or malformed documents are not an error: whatever was collected
    before the tokenizer gave up is returned, which is usually an empty
    :class:`PreviewMetadata`.
    """
    scanner = _MetaTagScanner()
    if not html:
        return scanner.metadata

    try:
        scanner.feed(html)
        scanner.close()
    except Exception as exc:  # noqa: BLE001
        logger.debug("extractor: tokenizer stopped early: %s", exc)

    return scanner.metadata
