"""driftrack configuration via environment variables and a run file.

Runtime knobs (log level, output directory, timeouts) come from
DRIFTRACK_* environment variables. Sources and drifters come from the
JSON run file at DRIFTRACK_CONFIG_PATH. Extra sources can be declared
with DRIFTRACK_SOURCE_N_* variables and are appended after the file's
sources -- no file edit required.
"""

import json
import os
import re
import logging

from pydantic import ValidationError

from driftrack.errors import ConfigError
from driftrack.models.config import RunConfig, SourceConfig

logger = logging.getLogger("driftrack.config")


class Settings:
    """All runtime configuration sourced from environment."""

    def __init__(self):
        # Core
        self.version = "0.1.0"
        self.log_level = os.environ.get("DRIFTRACK_LOG_LEVEL", "info")
        self.api_port = int(os.environ.get("DRIFTRACK_API_PORT", "8080"))

        # Run inputs and outputs
        self.config_path = os.environ.get("DRIFTRACK_CONFIG_PATH", "drifters.json")
        self.output_dir = os.environ.get("DRIFTRACK_OUTPUT_DIR", "output")

        # Retrieval
        self.fetch_timeout = float(
            os.environ.get("DRIFTRACK_FETCH_TIMEOUT", "30")
        )

        # Sources (discovered dynamically)
        self.sources = self._discover_sources()

    def _discover_sources(self) -> list[SourceConfig]:
        """Discover source definitions from DRIFTRACK_SOURCE_N_* variables.

        Each source needs a URL and a YEAR; ESNS is a comma separated
        list of transmitter ids. Incomplete definitions are skipped.
        """
        source_numbers: set[str] = set()
        pattern = re.compile(r"^DRIFTRACK_SOURCE_(\d+)_(.+)$")

        for key in os.environ:
            match = pattern.match(key)
            if match:
                source_numbers.add(match.group(1))

        sources: list[SourceConfig] = []
        for num in sorted(source_numbers, key=int):
            prefix = f"DRIFTRACK_SOURCE_{num}_"
            raw: dict[str, str] = {}

            for key, val in os.environ.items():
                if key.startswith(prefix):
                    param = key[len(prefix):].lower()
                    raw[param] = val

            if not raw.get("url"):
                logger.warning("Source %s has no URL defined, skipping", num)
                continue

            try:
                source = SourceConfig(
                    url=raw["url"],
                    year=int(raw.get("year", "")),
                    esns=[
                        int(esn) for esn in raw.get("esns", "").split(",")
                        if esn.strip()
                    ],
                    source_id=f"env_source_{num}",
                )
            except (ValueError, ValidationError) as e:
                logger.warning("Source %s is invalid, skipping: %s", num, e)
                continue

            sources.append(source)
            logger.info(
                "Discovered source [%s]: url=%s year=%d esns=%d",
                source.source_id, source.url, source.year, len(source.esns),
            )

        return sources


def load_run_config(
    path: str | os.PathLike,
    extra_sources: list[SourceConfig] | None = None,
) -> RunConfig:
    """Load and validate the JSON run file.

    Raises ConfigError when the file is missing, is not JSON, or does
    not describe a valid set of sources and drifters.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read run config {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"run config {path} is not valid JSON: {e}") from e

    try:
        config = RunConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid run config {path}: {e}") from e

    if extra_sources:
        config = config.model_copy(
            update={"sources": [*config.sources, *extra_sources]}
        )

    logger.info(
        "Loaded run config %s: %d sources, %d drifters",
        path, len(config.sources), len(config.drifters),
    )
    return config


settings = Settings()
