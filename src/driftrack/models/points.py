"""Decoded records and reconstructed positions.

These are the hot-path value types: one FeedRecord per feed row, one
DataPoint per retained record. Both are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from driftrack.models.config import DrifterConfig


@dataclass(frozen=True)
class FeedRecord:
    """One decoded feed row. Carries no year; see decoding.year."""
    transmitter_id: int
    month: int
    day: int
    hour: int
    minute: int
    fractional_day: float
    latitude: float
    longitude: float


@dataclass(frozen=True)
class DataPoint:
    """A position fix at an absolute UTC instant (epoch seconds)."""
    timestamp: int
    latitude: float
    longitude: float


@dataclass
class DrifterTrack:
    """The final ordered, window-filtered series of one drifter."""
    drifter: DrifterConfig
    points: list[DataPoint] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.drifter.name

    def __len__(self) -> int:
        return len(self.points)
