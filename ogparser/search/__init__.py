"""Search index package."""

from ogparser.search.solr import SolrIndex, build_description_update

__all__ = ["SolrIndex", "build_description_update"]
