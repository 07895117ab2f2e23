"""Pytest configuration for the driftrack test suite."""

import os

# Ensure test environment variables are set before any imports
os.environ.setdefault("DRIFTRACK_LOG_LEVEL", "warning")
os.environ.setdefault("DRIFTRACK_OUTPUT_DIR", "output")
