"""Drifter track export.

One text file per drifter, ``<output_dir>/<name>.dat``, one line per
point in track order:

    <epoch-seconds> <latitude> <longitude>

A drifter whose file cannot be written is reported and skipped; the
remaining drifters are still exported.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from driftrack.errors import ExportError
from driftrack.models.points import DataPoint, DrifterTrack

logger = logging.getLogger("driftrack.export.writer")

TRACK_SUFFIX = ".dat"


@dataclass
class ExportReport:
    """Outcome of exporting a set of drifter tracks."""
    written: dict[str, Path] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def track_path(name: str, output_dir: str | os.PathLike) -> Path:
    """Destination file for a drifter, refusing names that leave output_dir."""
    if (
        not name
        or name in (".", "..")
        or "/" in name
        or "\\" in name
        or "\x00" in name
    ):
        raise ExportError(name, "drifter name is not a valid file name")
    return Path(output_dir) / f"{name}{TRACK_SUFFIX}"


def format_point(point: DataPoint) -> str:
    return f"{point.timestamp} {point.latitude!r} {point.longitude!r}\n"


def export_track(track: DrifterTrack, output_dir: str | os.PathLike) -> Path:
    """Write one drifter track, creating output_dir if absent."""
    path = track_path(track.name, output_dir)
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.writelines(format_point(point) for point in track.points)
    except OSError as e:
        raise ExportError(track.name, f"cannot write {path}: {e}") from e

    logger.info(
        "Saved %d points", len(track.points),
        extra={"drifter": track.name, "path": path},
    )
    return path


def export_tracks(
    tracks: Iterable[DrifterTrack],
    output_dir: str | os.PathLike,
) -> ExportReport:
    """Export every track; failures are logged and collected, not raised."""
    report = ExportReport()
    for track in tracks:
        try:
            report.written[track.name] = export_track(track, output_dir)
        except ExportError as e:
            logger.error(
                "Export failed: %s", e.message, extra={"drifter": track.name}
            )
            report.failed[track.name] = e.message
    return report


def read_track(path: str | os.PathLike) -> list[DataPoint]:
    """Parse an exported track file.

    Lines with fewer than 3 fields, or whose fields do not parse as
    numbers, are skipped.
    """
    points: list[DataPoint] = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            fields = line.split()
            if len(fields) < 3:
                continue
            try:
                point = DataPoint(
                    timestamp=int(fields[0]),
                    latitude=float(fields[1]),
                    longitude=float(fields[2]),
                )
            except ValueError:
                logger.warning(
                    "Skipping unparsable track line: %r", line.rstrip("\n"),
                    extra={"path": path},
                )
                continue
            points.append(point)
    return points


def list_tracks(output_dir: str | os.PathLike) -> list[str]:
    """Names of the drifter tracks present in output_dir, sorted."""
    directory = Path(output_dir)
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.glob(f"*{TRACK_SUFFIX}") if p.is_file())
