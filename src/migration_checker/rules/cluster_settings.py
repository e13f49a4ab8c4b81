"""Settings catalog for removed, renamed and unrecognised setting names."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence

import yaml

from ..models import Finding, Severity
from ..normalization import strip_dot_num
from .matcher import Matcher, check_mapping

_DEFAULT_MANIFEST = Path(__file__).resolve().parent / "manifests" / "settings-5.0.yaml"
_WILDCARD = re.compile(r"[*?[]")

SECTIONS = ("removed", "renamed", "known")

_DEFAULT_SEVERITIES = {
    "removed": Severity.CRITICAL,
    "renamed": Severity.CRITICAL,
    "known": Severity.WARN,
}


class SettingsManifestError(RuntimeError):
    """Raised when a settings manifest cannot be loaded or parsed."""


class SettingsCatalog(ABC):
    """Settings-map checks run after the per-node rules.

    Each check consumes the keys it flags.
    """

    @abstractmethod
    def removed_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        """Flag settings that no longer exist."""

    @abstractmethod
    def renamed_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        """Flag settings that exist under a new name."""

    @abstractmethod
    def unknown_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        """Flag settings that nothing recognises."""

    def evaluate(self, settings: MutableMapping[str, Any]) -> List[Finding]:
        """Run the three checks in their fixed order."""

        return [
            self.removed_settings(settings),
            self.renamed_settings(settings),
            self.unknown_settings(settings),
        ]


@dataclass(slots=True)
class SettingsManifest:
    """Merged contents of one or more settings manifests."""

    removed: List[str] = field(default_factory=list)
    renamed: Dict[str, str] = field(default_factory=dict)
    known: List[str] = field(default_factory=list)
    severities: Dict[str, Severity] = field(default_factory=lambda: dict(_DEFAULT_SEVERITIES))
    doc_urls: Dict[str, str] = field(default_factory=dict)


class ManifestSettingsCatalog(SettingsCatalog):
    """:class:`SettingsCatalog` driven by YAML manifests.

    Entries in every section may be exact setting names or shell-style
    wildcards such as ``discovery.zen.ping.multicast.*``. Keys are matched after
    :func:`strip_dot_num`, so array-valued settings match their base name.
    """

    def __init__(self, manifest: SettingsManifest) -> None:
        self.manifest = manifest

    @classmethod
    def from_manifests(
        cls,
        manifests: Sequence[Path | str] | None = None,
        *,
        include_default: bool = True,
    ) -> "ManifestSettingsCatalog":
        paths: List[Path] = [_DEFAULT_MANIFEST] if include_default else []
        if manifests:
            paths.extend(Path(path) for path in manifests)
        return cls(load_manifests(paths))

    # ------------------------------------------------------------------
    def removed_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        def matcher(value: Any, key: str) -> Optional[str]:
            base_key = strip_dot_num(key)
            if not _matches_any(base_key, self.manifest.removed):
                return None

            del settings[key]
            return f"`{base_key}` has been removed"

        return self._check("removed", "Removed settings", settings, matcher)

    def renamed_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        def matcher(value: Any, key: str) -> Optional[str]:
            base_key = strip_dot_num(key)
            new_key = _renamed_to(base_key, self.manifest.renamed)
            if new_key is None:
                return None

            del settings[key]
            return f"`{base_key}` has been renamed to `{new_key}`"

        return self._check("renamed", "Renamed settings", settings, matcher)

    def unknown_settings(self, settings: MutableMapping[str, Any]) -> Finding:
        def matcher(value: Any, key: str) -> Optional[str]:
            base_key = strip_dot_num(key)
            if _matches_any(base_key, self.manifest.known):
                return None

            del settings[key]
            return f"`{base_key}` is not a recognised setting"

        return self._check("known", "Unknown settings", settings, matcher)

    # ------------------------------------------------------------------
    def _check(
        self,
        section: str,
        title: str,
        settings: MutableMapping[str, Any],
        matcher: Matcher,
    ) -> Finding:
        return check_mapping(
            self.manifest.severities[section],
            title,
            settings,
            matcher,
            self.manifest.doc_urls.get(section, ""),
        )


def _matches_any(key: str, patterns: Sequence[str]) -> bool:
    return any(fnmatchcase(key, pattern) for pattern in patterns)


def _renamed_to(key: str, renamed: Mapping[str, str]) -> Optional[str]:
    """Return the new name for ``key``, or ``None`` when it was not renamed.

    Exact entries win over wildcard ones. A ``prefix.*`` entry mapped to
    ``other.*`` carries the matched suffix over; any other wildcard entry
    maps to its target verbatim.
    """

    if key in renamed:
        return renamed[key]

    for pattern, new_key in renamed.items():
        if not _WILDCARD.search(pattern) or not fnmatchcase(key, pattern):
            continue
        if pattern.endswith(".*") and new_key.endswith(".*"):
            return new_key[:-1] + key[len(pattern) - 1:]
        return new_key
    return None


# ----------------------------------------------------------------------
def load_manifests(paths: Sequence[Path | str]) -> SettingsManifest:
    """Merge the manifests at ``paths``; later files extend or override earlier ones."""

    manifest = SettingsManifest()
    for path in paths:
        data = _load_manifest(Path(path))
        for section in SECTIONS:
            config = data.get(section)
            if config is None:
                continue
            if not isinstance(config, Mapping):
                raise SettingsManifestError(f"Section `{section}` must be a mapping: {path}")
            _merge_section(manifest, section, config, Path(path))

    return manifest


def _merge_section(
    manifest: SettingsManifest,
    section: str,
    config: Mapping[str, Any],
    path: Path,
) -> None:
    severity = config.get("severity")
    if severity is not None:
        try:
            manifest.severities[section] = Severity.from_value(severity)
        except ValueError as exc:
            raise SettingsManifestError(f"Invalid severity for `{section}` in {path}") from exc

    if config.get("doc_url"):
        manifest.doc_urls[section] = str(config["doc_url"])

    entries = config.get("settings") or []
    if section == "renamed":
        if not isinstance(entries, Mapping):
            raise SettingsManifestError(f"`renamed.settings` must map old names to new: {path}")
        manifest.renamed.update({str(old): str(new) for old, new in entries.items()})
        return

    if not isinstance(entries, list):
        raise SettingsManifestError(f"`{section}.settings` must be a list: {path}")
    target = manifest.removed if section == "removed" else manifest.known
    target.extend(str(entry) for entry in entries if entry)


def _load_manifest(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise SettingsManifestError(f"Settings manifest not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
        raise SettingsManifestError(f"Failed to read settings manifest {path}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise SettingsManifestError(f"Invalid YAML in settings manifest {path}") from exc

    if not isinstance(data, Mapping):
        raise SettingsManifestError(f"Settings manifest must be a mapping: {path}")

    return dict(data)


__all__ = [
    "ManifestSettingsCatalog",
    "SettingsCatalog",
    "SettingsManifest",
    "SettingsManifestError",
    "load_manifests",
]
