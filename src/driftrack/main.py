"""driftrack read-only API.

Serves the exported drifter tracks and their summaries to map viewers.
It never runs the pipeline; it only reads what ``driftrack run`` wrote.

    uvicorn driftrack.main:app --port $DRIFTRACK_API_PORT
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException

from driftrack.analysis.track_stats import summarize_track
from driftrack.config import settings
from driftrack.errors import ExportError
from driftrack.export.writer import list_tracks, read_track, track_path
from driftrack.utils.logging import configure_logging

configure_logging(settings.log_level)
logger = logging.getLogger("driftrack")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("driftrack v%s API starting", settings.version)
    logger.info("Log level: %s", settings.log_level)
    logger.info("API port: %s", settings.api_port)
    logger.info("Track directory: %s", settings.output_dir)
    yield


app = FastAPI(
    title="driftrack",
    description="Reconstructed drifter-buoy tracks",
    version=settings.version,
    lifespan=lifespan,
)


def get_output_dir() -> str:
    return settings.output_dir


def _summary(points):
    summary = summarize_track(points)
    return summary.to_dict() if summary else None


@app.get("/health")
def health():
    return {"status": "ok", "version": settings.version}


@app.get("/drifters")
def drifters(output_dir: str = Depends(get_output_dir)):
    return [
        {"name": name, "summary": _summary(read_track(track_path(name, output_dir)))}
        for name in list_tracks(output_dir)
    ]


@app.get("/drifters/{name}")
def drifter(name: str, output_dir: str = Depends(get_output_dir)):
    try:
        path = track_path(name, output_dir)
    except ExportError:
        raise HTTPException(status_code=404, detail=f"Unknown drifter {name!r}")
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Unknown drifter {name!r}")

    points = read_track(path)
    return {
        "name": name,
        "summary": _summary(points),
        "points": [
            {"timestamp": p.timestamp, "latitude": p.latitude, "longitude": p.longitude}
            for p in points
        ],
    }
