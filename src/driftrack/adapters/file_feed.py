"""Local file feed adapter, for plain paths and file:// URLs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import unquote, urlparse

from driftrack.adapters.base import BaseFeedAdapter
from driftrack.errors import FeedRetrievalError


def local_path(location: str) -> Path:
    """Filesystem path of a plain path or file:// URL."""
    if location.startswith("file://"):
        return Path(unquote(urlparse(location).path))
    return Path(location)


class FileFeedAdapter(BaseFeedAdapter):
    """Feed adapter reading a feed dump from the local filesystem."""

    @property
    def adapter_type(self) -> str:
        return "file"

    def _read(self) -> str:
        path = local_path(self.location)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FeedRetrievalError(self.source_id, f"cannot read {path}: {e}") from e

    async def _read_text(self) -> str:
        return await asyncio.to_thread(self._read)
