from __future__ import annotations

from typing import Any

import pytest

from migration_checker.adapters import ClusterClientError
from migration_checker.evaluation import ClusterEvaluator, NodeEvaluator
from migration_checker.models import Finding, Node, Severity
from migration_checker.reporting import ReportCollector
from migration_checker.rules import ManifestSettingsCatalog, NodeRule, SettingsCatalog
from migration_checker.service import MigrationService


def _node_payload(name: str, host: str, settings: dict[str, str]) -> dict[str, Any]:
    return {
        "name": name,
        "host": host,
        "attributes": {},
        "settings": {"name": name, **settings},
        "os": {"name": "Linux"},
        "process": {"mlockall": False},
        "jvm": {"mem": {"heap_init_in_bytes": 1024, "heap_max_in_bytes": 1024}},
        "plugins": [],
    }


CLEAN_SETTINGS = {
    "cluster.name": "prod",
    "discovery.zen.minimum_master_nodes": "2",
    "path.home": "/usr/share/es",
}


def _responses(dirty_settings: dict[str, str]) -> tuple[dict[str, Any], dict[str, Any]]:
    info = {
        "nodes": {
            "b-id": _node_payload("node-b", "10.0.0.2", dirty_settings),
            "a-id": _node_payload("node-a", "10.0.0.1", CLEAN_SETTINGS),
        }
    }
    stats = {
        "nodes": {
            "a-id": {"process": {"max_file_descriptors": 65536}},
            "b-id": {"process": {"max_file_descriptors": 65536}},
        }
    }
    return info, stats


class DummyClient:
    def __init__(self, info: Any, stats: Any, error: Exception | None = None) -> None:
        self.info = info
        self.stats = stats
        self.error = error

    def nodes_info(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.info

    def nodes_process_stats(self) -> Any:
        return self.stats


class RecordingCatalog(SettingsCatalog):
    def __init__(self, severity: Severity = Severity.OK) -> None:
        self.severity = severity
        self.seen: list[dict[str, Any]] = []

    def _finding(self, title: str) -> Finding:
        messages = ["flagged"] if self.severity != Severity.OK else []
        return Finding.build(self.severity, title, messages, "")

    def removed_settings(self, settings):
        self.seen.append(dict(settings))
        return self._finding("Removed settings")

    def renamed_settings(self, settings):
        return self._finding("Renamed settings")

    def unknown_settings(self, settings):
        return self._finding("Unknown settings")


def test_service_grades_cluster_by_worst_node() -> None:
    info, stats = _responses({**CLEAN_SETTINGS, "threadpool.search.queue": "100"})
    reporter = ReportCollector()
    service = MigrationService(
        DummyClient(info, stats),
        settings_catalog=ManifestSettingsCatalog.from_manifests(),
        reporter=reporter,
    )

    assert service.run() == Severity.CRITICAL

    assert [section.title for section in reporter.sections] == [
        "`node-a/10.0.0.1 [a-id]`",
        "`node-b/10.0.0.2 [b-id]`",
    ]
    assert reporter.sections[0].severity == Severity.OK
    assert reporter.sections[1].severity == Severity.CRITICAL
    assert len(reporter.sections[0].findings) == 14


def test_clean_cluster_is_ok() -> None:
    info, stats = _responses(CLEAN_SETTINGS)
    service = MigrationService(
        DummyClient(info, stats),
        settings_catalog=ManifestSettingsCatalog.from_manifests(),
    )

    assert service.run() == Severity.OK


def test_warn_from_settings_catalog_is_not_lost() -> None:
    info, stats = _responses(CLEAN_SETTINGS)
    service = MigrationService(
        DummyClient(info, stats),
        settings_catalog=RecordingCatalog(Severity.WARN),
    )

    assert service.run() == Severity.WARN


def test_node_rules_consume_keys_before_settings_catalog() -> None:
    info, stats = _responses({**CLEAN_SETTINGS, "index.refresh_interval": "5s"})
    catalog = RecordingCatalog()
    MigrationService(DummyClient(info, stats), settings_catalog=catalog).run()

    assert all("index.refresh_interval" not in seen for seen in catalog.seen)
    assert all("name" not in seen for seen in catalog.seen)


def test_fetch_errors_propagate() -> None:
    info, stats = _responses(CLEAN_SETTINGS)
    service = MigrationService(
        DummyClient(info, stats, error=ClusterClientError("boom")),
        settings_catalog=RecordingCatalog(),
    )

    with pytest.raises(ClusterClientError):
        service.run()


def test_node_evaluator_runs_pre_step_and_custom_rules() -> None:
    seen: list[dict[str, Any]] = []

    def record(node: Node) -> list[str]:
        seen.append(dict(node.settings))
        return []

    evaluator = NodeEvaluator(
        RecordingCatalog(),
        rules=[NodeRule("Recorder", "", record)],
    )
    node = Node(node_id="x", plugins=["shield"], settings={"index.queries.cache.type": "x"})

    assert evaluator.evaluate(node) == Severity.OK
    assert seen == [{}]


def test_cluster_evaluator_seeds_with_ok() -> None:
    evaluator = ClusterEvaluator(NodeEvaluator(RecordingCatalog(), rules=[]))

    assert evaluator.evaluate({"nodes": {}}, {"nodes": {}}) == Severity.OK
