"""
Pushes each poll to a monitoring aggregator over HTTP as one JSON document.

Failures are logged and counted but never raised: a flaky aggregator must
not stall collection.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx

log = logging.getLogger(__name__)


class HttpReporter:

    def __init__(
        self,
        url: str,
        source: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._url = url
        self._source = source
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)
        self.sent = 0
        self.failures = 0

    def report(self, values: Dict[str, float], timestamp: Optional[datetime] = None) -> bool:
        payload = {
            "source": self._source,
            "timestamp": (timestamp or datetime.now(timezone.utc)).isoformat(),
            "metrics": values,
        }

        try:
            response = self._client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failures += 1
            log.warning("Push to %s failed (%d so far): %s", self._url, self.failures, e)
            return False

        self.sent += 1
        return True

    def close(self):
        self._client.close()
