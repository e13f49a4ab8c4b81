"""Node and cluster level evaluation of the rule catalogs."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from .models import Node, Severity, worse
from .normalization import NodeNormalizer
from .reporting import ReportCollector, Reporter
from .rules import NODE_RULES, NodeRule, SettingsCatalog, drop_auto_managed_settings

logger = logging.getLogger(__name__)


class NodeEvaluator:
    """Run the node rules followed by the settings catalog against one node."""

    def __init__(
        self,
        settings_catalog: SettingsCatalog,
        *,
        rules: Sequence[NodeRule] = NODE_RULES,
        reporter: Reporter | None = None,
    ) -> None:
        self.settings_catalog = settings_catalog
        self.rules = tuple(rules)
        self.reporter = reporter or ReportCollector()

    def evaluate(self, node: Node) -> Severity:
        """Evaluate ``node`` and return the worst severity of its findings.

        The node's settings map is consumed along the way.
        """

        logger.info("Checking node %s", node.display_name)
        self.reporter.start_section("node", f"`{node.display_name}`")

        drop_auto_managed_settings(node)

        findings = [rule.evaluate(node) for rule in self.rules]
        findings.extend(self.settings_catalog.evaluate(node.settings))

        severity = Severity.OK
        for finding in findings:
            self.reporter.result(finding)
            severity = worse(severity, finding.severity)

        logger.info("Node %s: %s", node.display_name, severity.value)
        return severity


class ClusterEvaluator:
    """Fold per-node severities into a single grade for the cluster."""

    def __init__(
        self,
        node_evaluator: NodeEvaluator,
        *,
        normalizer: NodeNormalizer | None = None,
    ) -> None:
        self.node_evaluator = node_evaluator
        self.normalizer = normalizer or NodeNormalizer()

    def evaluate(
        self,
        settings_response: Mapping[str, Any],
        stats_response: Mapping[str, Any],
    ) -> Severity:
        registry = self.normalizer.normalize(settings_response, stats_response)
        logger.info("Evaluating %d node(s)", len(registry))

        severity = Severity.OK
        for node in self.normalizer.ordered(registry):
            severity = worse(severity, self.node_evaluator.evaluate(node))
        return severity


__all__ = ["ClusterEvaluator", "NodeEvaluator"]
