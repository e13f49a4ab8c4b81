"""Orchestration layer used by the CLI to execute a migration check."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol, Tuple

from .adapters import ClusterClientError
from .evaluation import ClusterEvaluator, NodeEvaluator
from .models import Severity
from .normalization import NodeNormalizationError, NodeNormalizer
from .reporting import ReportCollector, Reporter
from .rules import ManifestSettingsCatalog, SettingsCatalog, SettingsManifestError

logger = logging.getLogger(__name__)


class NodesSource(Protocol):
    """The two reads the service needs from the cluster client."""

    def nodes_info(self) -> Any:
        ...

    def nodes_process_stats(self) -> Any:
        ...


class MigrationService:
    """High level service that fetches node data and grades it."""

    def __init__(
        self,
        client: NodesSource,
        *,
        settings_catalog: SettingsCatalog | None = None,
        reporter: Reporter | None = None,
        normalizer: NodeNormalizer | None = None,
    ) -> None:
        self._client = client
        self._settings_catalog = settings_catalog or ManifestSettingsCatalog.from_manifests()
        self.reporter = reporter or ReportCollector()
        self._normalizer = normalizer or NodeNormalizer()

    # ------------------------------------------------------------------
    def run(self) -> Severity:
        """Fetch node information and return the cluster-wide severity.

        Fetch and normalization errors propagate to the caller unchanged.
        """

        settings_response, stats_response = self._fetch()

        node_evaluator = NodeEvaluator(self._settings_catalog, reporter=self.reporter)
        evaluator = ClusterEvaluator(node_evaluator, normalizer=self._normalizer)
        severity = evaluator.evaluate(settings_response, stats_response)

        logger.info("Cluster result: %s", severity.value)
        return severity

    # ------------------------------------------------------------------
    def _fetch(self) -> Tuple[Any, Any]:
        with ThreadPoolExecutor(max_workers=2) as executor:
            info_future = executor.submit(self._client.nodes_info)
            stats_future = executor.submit(self._client.nodes_process_stats)
            return info_future.result(), stats_future.result()


__all__ = [
    "ClusterClientError",
    "MigrationService",
    "NodeNormalizationError",
    "SettingsManifestError",
]
