"""Scraper package — page fetch & Open Graph extraction."""

from ogparser.scraper.extractor import extract_preview_metadata
from ogparser.scraper.fetcher import fetch_item, user_agent_for
from ogparser.scraper.models import FetchResult, Item, PreviewMetadata, ScrapedItem

__all__ = [
    "fetch_item",
    "user_agent_for",
    "extract_preview_metadata",
    "Item",
    "FetchResult",
    "PreviewMetadata",
    "ScrapedItem",
]
