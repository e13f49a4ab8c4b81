"""Per-node compatibility rules.

Each rule inspects a single :class:`~migration_checker.models.Node`. Rules that
walk the settings map consume the keys they flag so that the broad sweeps at
the end of the catalog (index settings, then the settings catalog) only see
what nothing earlier has already explained. The order of :data:`NODE_RULES`
is therefore part of the behaviour.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..models import Finding, Node, Severity
from ..normalization import strip_dot_num
from .matcher import collect_messages

DOCS_BASE = "https://www.elastic.co/guide/en/elasticsearch/reference/master"
BREAKING_SETTINGS_DOCS = f"{DOCS_BASE}/breaking_50_settings_changes.html"

ROLE_MESSAGES = {
    "data": "`node.data` is no longer reported as a node attribute; it now defines a node role",
    "master": "`node.master` is no longer reported as a node attribute; it now defines a node role",
    "client": (
        "`node.client: true` should be replaced with `node.data: false` and "
        "`node.master: false`"
    ),
}

# attribute names that are built-in node settings rather than custom attributes
BUILTIN_NODE_SETTINGS = frozenset(
    {
        "local",
        "mode",
        "client",
        "data",
        "master",
        "max_local_storage_nodes",
        "portsfile",
        "enable_lucene_segment_infos_trace",
        "name",
        "add_id_to_custom_path",
    }
)

MAC_OS_NAME = "Mac OS X"
MAC_MIN_FILE_DESCRIPTORS = 10240
MIN_FILE_DESCRIPTORS = 65536
HEAP_TOLERANCE = 1.1

INDEX_SETTINGS_ALLOWED = frozenset({"index.codec", "index.store.fs.fs_lock", "index.store.type"})

SHIELD_PLUGIN = "shield"
SHIELD_MANAGED_SETTINGS = ("index.queries.cache.type",)

_SCRIPT_RENAMES = (
    (re.compile(r"\.indexed"), ".stored"),
    (re.compile(r"\.py\b"), ".python"),
    (re.compile(r"\.js\b"), ".javascript"),
)
_SCRIPT_VALUES = ("true", "false")
_DEFAULT_INDEX_ANALYZER = re.compile(r"^(index\.analysis\.analyzer\.default)_index")
_FIXED_POOLS = re.compile(r"\.(index|search|bulk|percolate|watcher)\.")
_SCALING_POOLS = re.compile(r"\.(snapshot|warmer|refresh|listener)\.")
_FIXED_QUEUE = re.compile(r"\.(capacity|queue)$")

NodeCheck = Callable[[Node], List[str]]


@dataclass(frozen=True, slots=True)
class NodeRule:
    """A named check over one node, reported with a documentation link."""

    title: str
    doc_url: str
    check: NodeCheck
    severity: Severity = Severity.CRITICAL

    def evaluate(self, node: Node) -> Finding:
        return Finding.build(self.severity, self.title, self.check(node), self.doc_url)


def drop_auto_managed_settings(node: Node) -> None:
    """Remove settings that a plugin writes on its own and the user cannot act on."""

    if node.has_plugin(SHIELD_PLUGIN):
        for key in SHIELD_MANAGED_SETTINGS:
            node.settings.pop(key, None)


# ----------------------------------------------------------------------
def node_roles(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        return ROLE_MESSAGES.get(key)

    return collect_messages(node.attributes, matcher)


def node_attributes(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        base_key = strip_dot_num(key)
        if base_key in BUILTIN_NODE_SETTINGS or base_key.startswith("attr."):
            return None

        # consumed from both views so a later pass does not report it again
        node.settings.pop(f"node.{key}", None)
        node.attributes.pop(key, None)
        return f"`node.{base_key}` should be rewritten as `node.attr.{base_key}`"

    return collect_messages(node.attributes, matcher)


def heap_size(node: Node) -> List[str]:
    if node.heap_init_in_bytes > HEAP_TOLERANCE * node.heap_max_in_bytes:
        return [
            "The min heap size (`-Xms`) and max heap size (`-Xmx`) must be set to the same value"
        ]
    return []


def file_descriptors(node: Node) -> List[str]:
    if node.max_file_descriptors is None:
        return []

    minimum = MAC_MIN_FILE_DESCRIPTORS if node.os_name == MAC_OS_NAME else MIN_FILE_DESCRIPTORS
    if node.max_file_descriptors < minimum:
        return [f"At least `{minimum}` file descriptors must be available to Elasticsearch"]
    return []


def mlockall(node: Node) -> List[str]:
    if node.settings.get("bootstrap.mlockall") == "true" and not node.mlockall:
        return ["`bootstrap.mlockall` is set to `true` but mlockall has failed"]
    return []


def minimum_master_nodes(node: Node) -> List[str]:
    if "discovery.zen.minimum_master_nodes" not in node.settings:
        return ["`discovery.zen.minimum_master_nodes` must be set before going into production"]
    return []


def script_settings(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        if not key.startswith("script."):
            return None

        messages: List[str] = []
        new_key = key
        for pattern, replacement in _SCRIPT_RENAMES:
            new_key = pattern.sub(replacement, new_key, count=1)

        if new_key != key:
            messages.append(f"`{key}` has been renamed to `{new_key}`")
            del node.settings[key]

        if isinstance(value, str) and value not in _SCRIPT_VALUES:
            messages.append(f"`{new_key}` only accepts `true` | `false`")

        return "\n".join(messages) or None

    return collect_messages(node.settings, matcher)


def host_settings(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        base_key = strip_dot_num(key)
        if base_key.endswith(".host") and value == "_non_loopback_":
            return f"`{base_key}` no longer accepts `_non_loopback_`"
        return None

    return collect_messages(node.settings, matcher)


def default_index_analyzer(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        if not _DEFAULT_INDEX_ANALYZER.match(key):
            return None

        new_key = _DEFAULT_INDEX_ANALYZER.sub(r"\1", key, count=1)
        del node.settings[key]
        return (
            f"`{key}` can no longer be set in the config file, "
            f"and has been renamed to `{new_key}`"
        )

    return collect_messages(node.settings, matcher)


def index_settings(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        base_key = strip_dot_num(key)
        if not base_key.startswith("index.") or base_key in INDEX_SETTINGS_ALLOWED:
            return None

        del node.settings[key]
        return f"`{base_key}` can no longer be set in the config file"

    return collect_messages(node.settings, matcher)


def thread_pool(node: Node) -> List[str]:
    def matcher(value: Any, key: str) -> Optional[str]:
        if not key.startswith("threadpool"):
            return None

        del node.settings[key]
        if "suggest" in key:
            return f"`{key}` has been removed"

        return f"`{key}` has been renamed to `{rename_thread_pool_setting(key)}`"

    return collect_messages(node.settings, matcher)


def rename_thread_pool_setting(key: str) -> str:
    """Return the new name of a ``threadpool.*`` setting."""

    new_key = key.replace("threadpool.watcher", "xpack.watcher.thread_pool", 1)
    new_key = new_key.replace("threadpool", "thread_pool", 1)

    if _FIXED_POOLS.search(new_key):
        return _FIXED_QUEUE.sub(".queue_size", new_key, count=1)
    if _SCALING_POOLS.search(new_key):
        return new_key.replace(".min", ".core", 1).replace(".size", ".max", 1)
    return new_key


NODE_RULES = (
    NodeRule("Node roles", f"{BREAKING_SETTINGS_DOCS}#_node_types_settings", node_roles),
    NodeRule(
        "Node attributes move to `attr` namespace",
        f"{BREAKING_SETTINGS_DOCS}#_node_attribute_settings",
        node_attributes,
    ),
    NodeRule("Heap size", f"{DOCS_BASE}/heap-size.html", heap_size),
    NodeRule("File descriptors", f"{DOCS_BASE}/file-descriptors.html", file_descriptors),
    NodeRule("Mlockall", f"{DOCS_BASE}/setup-configuration-memory.html", mlockall),
    NodeRule(
        "Minimum master nodes",
        f"{DOCS_BASE}/important-settings.html#minimum_master_nodes",
        minimum_master_nodes,
    ),
    NodeRule("Script settings", f"{BREAKING_SETTINGS_DOCS}#_script_mode_settings", script_settings),
    NodeRule("Host settings", f"{BREAKING_SETTINGS_DOCS}#_network_settings", host_settings),
    NodeRule(
        "Default index analyzer",
        f"{BREAKING_SETTINGS_DOCS}#_index_level_settings",
        default_index_analyzer,
    ),
    NodeRule("Index settings", f"{BREAKING_SETTINGS_DOCS}#_index_level_settings", index_settings),
    NodeRule("Thread pool settings", f"{BREAKING_SETTINGS_DOCS}#_threadpool_settings", thread_pool),
)


__all__ = [
    "NODE_RULES",
    "NodeRule",
    "drop_auto_managed_settings",
    "rename_thread_pool_setting",
]
