"""Abstract feed adapter interface.

All feed adapters implement this contract. An adapter has exactly two
responsibilities: transport (get the feed text and split it into rows)
and health (what happened on the last fetch). Adapters do NOT decode
fields, reorder rows, or filter transmitters -- row order is the one
thing year reconstruction depends on.

There are no retries: a feed that cannot be fetched or split into a
table aborts the run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from driftrack.decoding.decoder import RECORD_ARITY
from driftrack.errors import FeedDecodeError
from driftrack.models.records import RecordBatch

logger = logging.getLogger("driftrack.adapters")


class FetchState(str, Enum):
    """Adapter fetch states."""
    IDLE = "idle"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass
class AdapterHealth:
    """Health snapshot for a feed adapter."""
    state: FetchState = FetchState.IDLE
    source_id: str = ""
    adapter_type: str = ""
    location: str = ""
    last_fetch_at: datetime | None = None
    rows_delivered: int = 0
    errors: int = 0
    message: str = ""
    checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def split_feed_rows(text: str) -> list[list[str]]:
    """Split feed text into whitespace-delimited rows.

    Blank lines are skipped. Every row must have the same number of
    fields as the first one, and at least RECORD_ARITY fields.
    """
    rows: list[list[str]] = []
    width: int | None = None

    for line_no, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        if width is None:
            width = len(fields)
            if width < RECORD_ARITY:
                raise FeedDecodeError(
                    f"line {line_no}: expected at least {RECORD_ARITY} fields, got {width}"
                )
        elif len(fields) != width:
            raise FeedDecodeError(
                f"line {line_no}: wrong number of fields ({len(fields)}, expected {width})"
            )
        rows.append(fields)

    return rows


class BaseFeedAdapter(ABC):
    """Abstract base for all driftrack feed adapters.

    Subclasses implement adapter_type and _read_text(); fetch() wraps
    the read with state tracking and row splitting.
    """

    def __init__(self, source_id: str, location: str):
        self.source_id = source_id
        self.location = location
        self._state = FetchState.IDLE
        self._rows_delivered = 0
        self._errors = 0
        self._last_fetch_at: datetime | None = None
        self._message = ""

    @property
    @abstractmethod
    def adapter_type(self) -> str:
        """Return the adapter type identifier (e.g. 'http', 'file')."""
        ...

    @abstractmethod
    async def _read_text(self) -> str:
        """Return the whole feed as text. Raise FeedRetrievalError on failure."""
        ...

    async def fetch(self) -> RecordBatch:
        """Retrieve the feed and return its rows in feed order."""
        self._state = FetchState.FETCHING
        logger.info(
            "Downloading %s", self.location, extra={"source_id": self.source_id}
        )
        try:
            text = await self._read_text()
            rows = split_feed_rows(text)
        except Exception as e:
            self._state = FetchState.FAILED
            self._record_error(str(e))
            raise

        self._state = FetchState.FETCHED
        self._record_rows(len(rows))
        logger.info(
            "Fetched %d rows", len(rows), extra={"source_id": self.source_id}
        )
        return RecordBatch(
            source_id=self.source_id,
            location=self.location,
            rows=rows,
        )

    def health(self) -> AdapterHealth:
        """Report the state of the last fetch."""
        return AdapterHealth(
            state=self._state,
            source_id=self.source_id,
            adapter_type=self.adapter_type,
            location=self.location,
            last_fetch_at=self._last_fetch_at,
            rows_delivered=self._rows_delivered,
            errors=self._errors,
            message=self._message,
        )

    def _record_rows(self, count: int) -> None:
        self._rows_delivered += count
        self._last_fetch_at = datetime.now(timezone.utc)

    def _record_error(self, msg: str) -> None:
        self._errors += 1
        self._message = msg
        logger.warning(
            "Adapter %s error [%s]: %s",
            self.adapter_type, self.source_id, msg,
        )
