"""Structured JSON logging for all driftrack components."""

import logging
import json
import sys
from datetime import datetime, timezone

# Context attributes copied into the log entry when passed via extra=
CONTEXT_FIELDS = ("source_id", "drifter", "path")


class JSONFormatter(logging.Formatter):
    """Emit logs as structured JSON."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = str(value)
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level="info"):
    """Configure structured logging for driftrack.

    Safe to call more than once: the level is updated, but only one
    JSON handler is ever attached.
    """
    root = logging.getLogger("driftrack")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.propagate = False
    return root
