"""driftrack exception hierarchy.

Fatal errors (configuration, retrieval, feed decoding) abort a run
before any output is written. Export errors are local to one drifter.
Lenient numeric decoding of individual fields is not an error at all.
"""

from __future__ import annotations


class DriftrackError(Exception):
    """Base exception for all driftrack failures."""


class ConfigError(DriftrackError):
    """Raised when the run configuration is missing or invalid."""


class FeedRetrievalError(DriftrackError):
    """Raised when a source feed cannot be fetched."""

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        self.message = message
        super().__init__(f"{source_id}: {message}")


class FeedDecodeError(DriftrackError):
    """Raised when feed text cannot be read as a table of records."""


class ExportError(DriftrackError):
    """Raised when a drifter track cannot be written."""

    def __init__(self, drifter: str, message: str):
        self.drifter = drifter
        self.message = message
        super().__init__(f"{drifter}: {message}")


class StoreFrozenError(DriftrackError):
    """Raised on mutation of a transmitter store after freeze()."""
