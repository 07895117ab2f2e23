"""HTTP feed adapter.

Downloads a drifter feed over http(s) with a single GET. The blocking
request runs in a worker thread so several feeds can download at once.
"""

from __future__ import annotations

import asyncio
import logging

import requests

from driftrack.adapters.base import BaseFeedAdapter
from driftrack.errors import FeedRetrievalError

logger = logging.getLogger("driftrack.adapters.http_feed")

DEFAULT_TIMEOUT = 30.0


class HttpFeedAdapter(BaseFeedAdapter):
    """Feed adapter for http:// and https:// locations."""

    def __init__(self, source_id: str, location: str, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(source_id, location)
        self._timeout = timeout

    @property
    def adapter_type(self) -> str:
        return "http"

    def _download(self) -> str:
        try:
            resp = requests.get(self.location, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FeedRetrievalError(self.source_id, f"GET {self.location} failed: {e}") from e
        return resp.text

    async def _read_text(self) -> str:
        return await asyncio.to_thread(self._download)
