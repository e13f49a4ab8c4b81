"""HTTP client used to read node information from a running cluster."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

NODES_INFO_PATH = "/_nodes/settings,os,process,jvm,plugins"
NODES_STATS_PATH = "/_nodes/stats/process"

DEFAULT_URL = "http://localhost:9200"
DEFAULT_TIMEOUT = 30.0


class ClusterClientError(RuntimeError):
    """Raised when a cluster API request fails or returns something other than JSON."""


class ClusterClient:
    """Thin JSON-over-HTTP wrapper around :class:`requests.Session`."""

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        *,
        auth: Optional[Tuple[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/json"
        if auth is not None:
            self.session.auth = auth
        self.session.verify = verify

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Issue ``GET path`` and return the decoded JSON body."""

        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s params=%s", url, dict(params or {}))

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ClusterClientError(f"Request to {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ClusterClientError(f"Response from {url} was not valid JSON") from exc

    # ------------------------------------------------------------------
    def nodes_info(self) -> Any:
        """Return settings, OS, process, JVM and plugin info with flattened setting keys."""

        return self.get(NODES_INFO_PATH, {"flat_settings": "true"})

    def nodes_process_stats(self) -> Any:
        return self.get(NODES_STATS_PATH)


__all__ = [
    "ClusterClient",
    "ClusterClientError",
    "NODES_INFO_PATH",
    "NODES_STATS_PATH",
]
