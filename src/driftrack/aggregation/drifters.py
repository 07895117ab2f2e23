"""Drifter aggregation and window filtering.

A drifter is a named entity served by one or more transmitters, which
may come from different feeds. Its track is the concatenation of its
transmitters' series, sorted by time and cut to the drifter's window.

Window boundaries are deliberately asymmetric and must stay that way:

- start: keep from the first point with timestamp >= start. If no
  point qualifies, nothing is dropped.
- end: find the last point with timestamp <= end and keep only the
  points before it, so that point itself is dropped. If no point
  qualifies, the last point is dropped.

Existing track files were produced with exactly these rules.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from driftrack.aggregation.store import TransmitterStore
from driftrack.models.config import DrifterConfig
from driftrack.models.points import DataPoint, DrifterTrack

logger = logging.getLogger("driftrack.aggregation.drifters")


def collect_points(drifter: DrifterConfig, store: TransmitterStore) -> list[DataPoint]:
    """Concatenate member series in listed order. Unknown ids add nothing."""
    points: list[DataPoint] = []
    for transmitter_id in drifter.esns:
        if transmitter_id not in store:
            logger.debug(
                "Transmitter %d has no points", transmitter_id,
                extra={"drifter": drifter.name},
            )
        points.extend(store.series(transmitter_id))
    return points


def _start_index(points: Sequence[DataPoint], window_start: int) -> int:
    for i, point in enumerate(points):
        if point.timestamp >= window_start:
            return i
    return 0


def _end_index(points: Sequence[DataPoint], window_end: int) -> int:
    for i in range(len(points) - 1, -1, -1):
        if points[i].timestamp <= window_end:
            return i
    return len(points) - 1


def apply_window(
    points: Sequence[DataPoint],
    window_start: Optional[int] = None,
    window_end: Optional[int] = None,
) -> list[DataPoint]:
    """Cut a time-sorted series to a drifter window.

    Zero or None disables a boundary. See the module docstring for the
    exact boundary rules.
    """
    result = list(points)
    if window_start:
        result = result[_start_index(result, window_start):]
    if window_end and result:
        result = result[:_end_index(result, window_end)]
    return result


def aggregate_drifter(drifter: DrifterConfig, store: TransmitterStore) -> DrifterTrack:
    """Build the final ordered, window-filtered track of one drifter."""
    points = collect_points(drifter, store)
    # list.sort is stable: equal timestamps keep concatenation order
    points.sort(key=lambda p: p.timestamp)
    windowed = apply_window(points, drifter.window_start, drifter.window_end)

    logger.info(
        "Aggregated %d points (%d before window)", len(windowed), len(points),
        extra={"drifter": drifter.name},
    )
    return DrifterTrack(drifter=drifter, points=windowed)


def aggregate_drifters(
    drifters: Iterable[DrifterConfig],
    store: TransmitterStore,
) -> dict[str, DrifterTrack]:
    """Aggregate every drifter, keyed by name in configuration order."""
    if not store.frozen:
        logger.warning("Aggregating over a store that is still mutable")
    return {
        drifter.name: aggregate_drifter(drifter, store)
        for drifter in drifters
    }
