"""Exception hierarchy for the OG parser.

Only run-level failures are raised as exceptions.  Per-item problems
(a page that won't load, a store write that fails) are logged where they
happen and never escape the pipeline.
"""

from __future__ import annotations


class OgParserError(Exception):
    """Base class for all errors raised by :mod:`ogparser`."""


class BootstrapError(OgParserError):
    """A run could not start: configuration or primary store unavailable."""
