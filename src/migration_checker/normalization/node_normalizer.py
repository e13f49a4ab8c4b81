"""Conversion helpers that turn nodes info and stats payloads into :class:`Node` records."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping

from ..models import Node

_NODE_PREFIX = "node."


class NodeNormalizationError(RuntimeError):
    """Raised when a nodes API response does not have the expected shape."""


class NodeNormalizer:
    """Build the node registry for one evaluation run."""

    def normalize(
        self,
        settings_response: Mapping[str, Any],
        stats_response: Mapping[str, Any],
    ) -> Dict[str, Node]:
        """Return nodes keyed by :attr:`Node.display_name`.

        ``settings_response`` is the flat-settings nodes info payload and
        ``stats_response`` the process stats payload; both are keyed by the
        internal node id.
        """

        info_nodes = self._nodes_section(settings_response, "nodes info")
        stats_nodes = self._nodes_section(stats_response, "nodes stats")

        registry: Dict[str, Node] = {}
        for node_id, info in info_nodes.items():
            if not isinstance(info, Mapping):
                raise NodeNormalizationError(f"Node entry for {node_id} must be an object")

            stats = stats_nodes.get(node_id)
            if not isinstance(stats, Mapping):
                raise NodeNormalizationError(f"No process stats returned for node {node_id}")

            node = self._normalize_node(str(node_id), info, stats)
            registry[node.display_name] = node

        return registry

    # ------------------------------------------------------------------
    def ordered(self, registry: Mapping[str, Node]) -> Iterator[Node]:
        """Yield nodes in ascending order of their display key."""

        for key in sorted(registry):
            yield registry[key]

    # ------------------------------------------------------------------
    def _nodes_section(self, response: Mapping[str, Any], label: str) -> Mapping[str, Any]:
        if not isinstance(response, Mapping):
            raise NodeNormalizationError(f"The {label} response must be a JSON object")

        nodes = response.get("nodes")
        if not isinstance(nodes, Mapping):
            raise NodeNormalizationError(f"The {label} response has no `nodes` object")
        return nodes

    def _normalize_node(
        self,
        node_id: str,
        info: Mapping[str, Any],
        stats: Mapping[str, Any],
    ) -> Node:
        settings = dict(self._section(info, "settings", node_id))
        # `name` is node metadata rather than a setting under evaluation
        settings.pop("name", None)

        attributes = info.get("attributes")
        if isinstance(attributes, Mapping):
            attributes = dict(attributes)
        else:
            attributes = self._attributes_from_settings(settings)

        process = self._section(info, "process", node_id)
        jvm_mem = self._section(self._section(info, "jvm", node_id), "mem", node_id, "jvm.")
        os_info = self._section(info, "os", node_id)
        stats_process = self._section(stats, "process", node_id, "stats ")

        return Node(
            node_id=node_id,
            name=str(info.get("name", "")),
            host=str(info.get("host", "")),
            attributes=attributes,
            settings=settings,
            plugins=self._plugin_names(info.get("plugins")),
            os_name=str(os_info.get("name", "")),
            heap_init_in_bytes=self._byte_count(jvm_mem, "heap_init_in_bytes", node_id),
            heap_max_in_bytes=self._byte_count(jvm_mem, "heap_max_in_bytes", node_id),
            mlockall=bool(process.get("mlockall", False)),
            max_file_descriptors=self._optional_int(stats_process.get("max_file_descriptors")),
        )

    def _section(
        self,
        container: Mapping[str, Any],
        key: str,
        node_id: str,
        label: str = "",
    ) -> Mapping[str, Any]:
        value = container.get(key)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise NodeNormalizationError(f"`{label}{key}` for node {node_id} must be an object")
        return value

    def _attributes_from_settings(self, settings: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            key[len(_NODE_PREFIX):]: value
            for key, value in settings.items()
            if key.startswith(_NODE_PREFIX)
        }

    def _plugin_names(self, plugins: Any) -> List[str]:
        if not isinstance(plugins, list):
            return []

        names: List[str] = []
        for plugin in plugins:
            if isinstance(plugin, Mapping) and plugin.get("name"):
                names.append(str(plugin["name"]))
        return names

    def _byte_count(self, section: Mapping[str, Any], key: str, node_id: str) -> int:
        try:
            return int(section.get(key) or 0)
        except (TypeError, ValueError) as exc:
            raise NodeNormalizationError(f"Invalid `jvm.mem.{key}` for node {node_id}") from exc

    def _optional_int(self, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


__all__ = ["NodeNormalizer", "NodeNormalizationError"]
