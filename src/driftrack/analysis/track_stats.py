"""Track summary statistics.

Computes the figures shown next to a drifter on a map: launch and last
fix dates, time at sea, distance travelled and speeds. Distances are
great-circle (haversine) on the mean Earth radius; speeds are in knots.

Consecutive fixes at the same position or the same instant are not
speed samples. They are skipped and the previous fix is kept as the
reference for the next one.

The last-24h figures look back one day from the last fix, not from the
current time, so a summary of a finished track does not change. A leg
that straddles the cutoff counts in proportion to its time inside the
window.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

from driftrack.models.points import DataPoint

EARTH_RADIUS_KM = 6371.0088
KM_PER_NAUTICAL_MILE = 1.852
RECENT_WINDOW_SECONDS = 24 * 3600


def haversine_km(a: DataPoint, b: DataPoint) -> float:
    """Great-circle distance between two fixes in kilometres."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def kph_to_knots(value: float) -> float:
    return value / KM_PER_NAUTICAL_MILE


@dataclass(frozen=True)
class TrackSummary:
    """Aggregate figures for one ordered track."""
    launch_timestamp: int
    last_timestamp: int
    duration_seconds: int
    distance_km: float
    average_speed_knots: float
    maximum_speed_knots: float
    maximum_speed_timestamp: Optional[int]
    fixes: int
    last_24h_distance_km: float = 0.0
    last_24h_average_speed_knots: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def recent_distance_km(
    points: Sequence[DataPoint],
    window_seconds: int = RECENT_WINDOW_SECONDS,
) -> float:
    """Distance covered in the window_seconds before the last fix."""
    if len(points) < 2:
        return 0.0
    cutoff = points[-1].timestamp - window_seconds
    distance = 0.0
    for previous, point in zip(points, points[1:]):
        if point.timestamp <= cutoff:
            continue
        leg_km = haversine_km(previous, point)
        if previous.timestamp >= cutoff:
            distance += leg_km
        else:
            distance += leg_km * (point.timestamp - cutoff) / (point.timestamp - previous.timestamp)
    return distance


def summarize_track(points: Sequence[DataPoint]) -> Optional[TrackSummary]:
    """Summarize a time-ordered track. Returns None for an empty track."""
    if not points:
        return None

    launch = points[0].timestamp
    last = points[-1].timestamp
    duration = last - launch

    distance = 0.0
    max_speed = 0.0
    max_speed_at: Optional[int] = None
    previous = points[0]

    for point in points[1:]:
        delta_km = haversine_km(previous, point)
        delta_hours = (point.timestamp - previous.timestamp) / 3600
        distance += delta_km

        if delta_km == 0 or delta_hours == 0:
            continue

        speed = kph_to_knots(delta_km / delta_hours)
        if speed > max_speed:
            max_speed = speed
            max_speed_at = point.timestamp
        previous = point

    average = kph_to_knots(distance / (duration / 3600)) if duration > 0 else 0.0
    recent = recent_distance_km(points)

    return TrackSummary(
        launch_timestamp=launch,
        last_timestamp=last,
        duration_seconds=duration,
        distance_km=distance,
        average_speed_knots=average,
        maximum_speed_knots=max_speed,
        maximum_speed_timestamp=max_speed_at,
        fixes=len(points),
        last_24h_distance_km=recent,
        last_24h_average_speed_knots=kph_to_knots(recent / 24),
    )
