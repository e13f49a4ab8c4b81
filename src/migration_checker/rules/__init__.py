"""Rule catalogs evaluated against each node."""

from .cluster_settings import (
    ManifestSettingsCatalog,
    SettingsCatalog,
    SettingsManifest,
    SettingsManifestError,
    load_manifests,
)
from .matcher import Matcher, check_mapping, collect_messages
from .node_rules import NODE_RULES, NodeRule, drop_auto_managed_settings

__all__ = [
    "ManifestSettingsCatalog",
    "Matcher",
    "NODE_RULES",
    "NodeRule",
    "SettingsCatalog",
    "SettingsManifest",
    "SettingsManifestError",
    "check_mapping",
    "collect_messages",
    "drop_auto_managed_settings",
    "load_manifests",
]
