"""Year reconstruction for feeds without a year column.

Feed rows carry month/day/time and a fractional day-of-year, but no
year. Many transmitters are interleaved in one feed. The year of each
row is inferred by a single ordered scan:

- a new transmitter id restarts at the source's base year;
- for the same transmitter, a drop in the fractional day means the
  counter wrapped past new year, so the year advances by one.

The scan is order-dependent and must see rows exactly in feed order.
Rows out of chronological order produce wrong years; that is an input
precondition, not something checked here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from driftrack.aggregation.store import TransmitterStore
from driftrack.decoding.decoder import decode_record
from driftrack.models.config import SourceConfig
from driftrack.models.points import DataPoint, FeedRecord

logger = logging.getLogger("driftrack.decoding.year")

_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()
SECONDS_PER_DAY = 86400
# The Gregorian calendar repeats every 400 years
DAYS_PER_400_YEARS = 146097


def utc_epoch_seconds(year: int, month: int, day: int, hour: int, minute: int) -> int:
    """Epoch seconds of a UTC wall-clock instant, normalizing overflow.

    Out-of-range fields carry into the next larger unit instead of
    raising: month 0 is December of the previous year, day 0 is the
    last day of the previous month, minute 75 is 01:15 past the hour.
    """
    carry_years, month_index = divmod(month - 1, 12)
    cycles, year_in_cycle = divmod(year + carry_years - 2000, 400)
    first_of_month = date(2000 + year_in_cycle, month_index + 1, 1)
    days = (
        first_of_month.toordinal() - _EPOCH_ORDINAL
        + cycles * DAYS_PER_400_YEARS
        + (day - 1)
    )
    return days * SECONDS_PER_DAY + hour * 3600 + minute * 60


class YearReconstructor:
    """State machine assigning a year to each record of one feed.

    State is (year, last_transmitter_id, last_fractional_day); advance()
    is the transition function for one record.
    """

    def __init__(self, base_year: int):
        self.base_year = base_year
        self.year = base_year
        self.last_transmitter_id: Optional[int] = None
        self.last_fractional_day = 0.0

    def advance(self, record: FeedRecord) -> int:
        """Consume one record in feed order and return its year."""
        if record.transmitter_id != self.last_transmitter_id:
            self.year = self.base_year
        elif record.fractional_day < self.last_fractional_day:
            self.year += 1

        self.last_fractional_day = record.fractional_day
        self.last_transmitter_id = record.transmitter_id
        return self.year

    @staticmethod
    def timestamp(record: FeedRecord, year: int) -> int:
        """Absolute UTC timestamp of a record in the given year."""
        return utc_epoch_seconds(
            year, record.month, record.day, record.hour, record.minute
        )


def reconstruct_points(
    records: Iterable[FeedRecord],
    source: SourceConfig,
) -> TransmitterStore:
    """Run one ordered pass over decoded records of a single source.

    Every record advances the year state. Only records from the
    source's transmitters become points. The returned store is frozen.
    """
    wanted = source.transmitter_set
    state = YearReconstructor(source.year)
    store = TransmitterStore()

    for record in records:
        year = state.advance(record)
        if record.transmitter_id in wanted:
            store.append(
                record.transmitter_id,
                DataPoint(
                    timestamp=state.timestamp(record, year),
                    latitude=record.latitude,
                    longitude=record.longitude,
                ),
            )

    return store.freeze()


def reconstruct_source(
    rows: Sequence[Sequence[str]],
    source: SourceConfig,
    source_id: str = "",
) -> TransmitterStore:
    """Decode raw rows of one source and reconstruct their points."""
    store = reconstruct_points((decode_record(row) for row in rows), source)
    logger.info(
        "Reconstructed %d points for %d transmitters from %d rows",
        len(store), len(store.transmitter_ids()), len(rows),
        extra={"source_id": source_id or source.url},
    )
    return store
