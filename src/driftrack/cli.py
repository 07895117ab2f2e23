"""driftrack command line.

    driftrack run [--config PATH] [--output DIR] [--log-level LEVEL]
    driftrack stats [--output DIR] NAME [NAME ...]

Exit codes for ``run``: 0 success, 1 some drifter failed to export,
2 configuration error, 3 feed retrieval or decoding error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Sequence

from driftrack.analysis.track_stats import summarize_track
from driftrack.config import load_run_config, settings
from driftrack.errors import ConfigError, ExportError, FeedDecodeError, FeedRetrievalError
from driftrack.export.writer import read_track, track_path
from driftrack.pipeline import run_pipeline
from driftrack.utils.logging import configure_logging

logger = logging.getLogger("driftrack.cli")

EXIT_OK = 0
EXIT_EXPORT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_FEED_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="driftrack", description="Drifter track reconstruction"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level,
        help="Override DRIFTRACK_LOG_LEVEL for this command",
    )
    # Accepted after the subcommand too; SUPPRESS keeps the top-level value
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", default=argparse.SUPPRESS, help=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser(
        "run", parents=[common], help="Fetch feeds and export drifter tracks"
    )
    run.add_argument("--config", default=settings.config_path, help="Run config JSON file")
    run.add_argument("--output", default=settings.output_dir, help="Output directory")

    stats = subparsers.add_parser(
        "stats", parents=[common], help="Summarize exported drifter tracks"
    )
    stats.add_argument("--output", default=settings.output_dir, help="Output directory")
    stats.add_argument("names", nargs="+", help="Drifter names")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "run":
        return _run_command(args)
    if args.command == "stats":
        return _stats_command(args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_command(args: argparse.Namespace) -> int:
    try:
        run_config = load_run_config(args.config, extra_sources=settings.sources)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    try:
        result = asyncio.run(
            run_pipeline(run_config, args.output, fetch_timeout=settings.fetch_timeout)
        )
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except (FeedRetrievalError, FeedDecodeError) as e:
        logger.error("Aborting run, feed error: %s", e)
        return EXIT_FEED_ERROR

    return EXIT_OK if result.ok else EXIT_EXPORT_FAILED


def _stats_command(args: argparse.Namespace) -> int:
    summaries: dict[str, object] = {}
    status = EXIT_OK
    for name in args.names:
        try:
            points = read_track(track_path(name, args.output))
        except (OSError, ValueError, ExportError) as e:
            logger.error("Cannot read track %s: %s", name, e)
            status = EXIT_EXPORT_FAILED
            continue
        summary = summarize_track(points)
        summaries[name] = summary.to_dict() if summary else None

    json.dump(summaries, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return status


if __name__ == "__main__":
    sys.exit(main())
