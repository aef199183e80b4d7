"""OG parser — fills in Open Graph preview metadata for recently published posts."""

__version__ = "0.1.0"
