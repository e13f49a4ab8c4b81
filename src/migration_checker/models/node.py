"""Node snapshot model evaluated by the rule catalogs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Node:
    """One cluster member as observed through the nodes info and stats APIs.

    ``settings`` is owned by this record alone. Rules delete keys from it once
    they have flagged them so that broader rules later in the run do not
    report the same key twice.
    """

    node_id: str
    name: str = ""
    host: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)
    settings: Dict[str, Any] = field(default_factory=dict)
    plugins: List[str] = field(default_factory=list)
    os_name: str = ""
    heap_init_in_bytes: int = 0
    heap_max_in_bytes: int = 0
    mlockall: bool = False
    max_file_descriptors: Optional[int] = None

    @property
    def display_name(self) -> str:
        """Return the ``name/host [node_id]`` key used for ordering and reporting."""

        return f"{self.name}/{self.host} [{self.node_id}]"

    def has_plugin(self, plugin_name: str) -> bool:
        return plugin_name in self.plugins
