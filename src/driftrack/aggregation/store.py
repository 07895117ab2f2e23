"""Per-transmitter point store.

One store is filled by each source pass and frozen when the pass ends.
The global view is a fresh store built by merging the per-source stores
key by key, in source order. Merging appends, it never overwrites, so a
transmitter that appears in two feeds keeps the points of both.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from driftrack.errors import StoreFrozenError
from driftrack.models.points import DataPoint

logger = logging.getLogger("driftrack.aggregation.store")


class TransmitterStore:
    """Mapping of transmitter id to its ordered point series."""

    def __init__(self):
        self._series: dict[int, list[DataPoint]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise StoreFrozenError("transmitter store is frozen")

    def append(self, transmitter_id: int, point: DataPoint) -> None:
        self._check_mutable()
        self._series.setdefault(transmitter_id, []).append(point)

    def extend(self, transmitter_id: int, points: Iterable[DataPoint]) -> None:
        self._check_mutable()
        self._series.setdefault(transmitter_id, []).extend(points)

    def merge(self, other: "TransmitterStore") -> "TransmitterStore":
        """Append every series of other onto this store."""
        for transmitter_id in other.transmitter_ids():
            if transmitter_id in self._series:
                logger.warning(
                    "Transmitter %d appears in more than one source, appending",
                    transmitter_id,
                )
            self.extend(transmitter_id, other.series(transmitter_id))
        return self

    def freeze(self) -> "TransmitterStore":
        self._frozen = True
        return self

    def series(self, transmitter_id: int) -> list[DataPoint]:
        """Copy of the series for one transmitter; empty if unknown."""
        return list(self._series.get(transmitter_id, ()))

    def transmitter_ids(self) -> list[int]:
        """Transmitter ids in first-seen order."""
        return list(self._series)

    def counts(self) -> dict[int, int]:
        return {tid: len(points) for tid, points in self._series.items()}

    def __contains__(self, transmitter_id: object) -> bool:
        return transmitter_id in self._series

    def __iter__(self) -> Iterator[int]:
        return iter(self.transmitter_ids())

    def __len__(self) -> int:
        return sum(len(points) for points in self._series.values())


def merge_stores(stores: Iterable[TransmitterStore]) -> TransmitterStore:
    """Build the frozen global view from per-source stores, in order."""
    merged = TransmitterStore()
    for store in stores:
        merged.merge(store)
    return merged.freeze()
