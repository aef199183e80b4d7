"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Item:
    """A post selected for scraping: its primary key and external link."""

    id: int
    url: str


@dataclass
class FetchResult:
    """The outcome of fetching one :class:`Item`.

    ``body`` is empty whenever the fetch failed for any reason; there is no
    separate error field.
    """

    item: Item
    body: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.body)


@dataclass
class PreviewMetadata:
    """Open Graph description and featured image found in a page."""

    description: str = ""
    featured_image: str = ""

    @property
    def is_complete(self) -> bool:
        """``True`` only when both fields were found."""
        return bool(self.description) and bool(self.featured_image)


@dataclass
class ScrapedItem:
    """A fetched page together with the metadata extracted from it."""

    item: Item
    body: str
    metadata: PreviewMetadata = field(default_factory=PreviewMetadata)

    @property
    def is_eligible(self) -> bool:
        """Whether this item may be written to the store and the index."""
        return self.metadata.is_complete
