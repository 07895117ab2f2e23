"""Feed row decoder.

Turns one whitespace-split feed row into a FeedRecord. Feed columns:

    0 ID  1 ESN  2 MONTH  3 DAY  4 HOUR  5 MINUTE
    6 DECIMAL_DATE  7 LONGITUDE  8 LATITUDE  [9.. ignored]

Decoding is permissive: a numeric field that does not parse becomes
zero. Structural problems (short rows, ragged tables) are caught
earlier by adapters.base.split_feed_rows.
"""

from __future__ import annotations

from typing import Sequence

from driftrack.models.points import FeedRecord

# Minimum number of fields a feed row must carry
RECORD_ARITY = 9

ESN_FIELD = 1
MONTH_FIELD = 2
DAY_FIELD = 3
HOUR_FIELD = 4
MINUTE_FIELD = 5
DECIMAL_DATE_FIELD = 6
LONGITUDE_FIELD = 7
LATITUDE_FIELD = 8


def _to_int(x: str) -> int:
    """Parse a base-10 integer field, 0 if invalid."""
    try:
        return int(x)
    except (TypeError, ValueError):
        return 0


def _to_float(x: str) -> float:
    """Parse a decimal float field, 0.0 if invalid."""
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def decode_record(fields: Sequence[str]) -> FeedRecord:
    """Decode one feed row. Never raises on numeric content."""
    return FeedRecord(
        transmitter_id=_to_int(fields[ESN_FIELD]),
        month=_to_int(fields[MONTH_FIELD]),
        day=_to_int(fields[DAY_FIELD]),
        hour=_to_int(fields[HOUR_FIELD]),
        minute=_to_int(fields[MINUTE_FIELD]),
        fractional_day=_to_float(fields[DECIMAL_DATE_FIELD]),
        latitude=_to_float(fields[LATITUDE_FIELD]),
        longitude=_to_float(fields[LONGITUDE_FIELD]),
    )
