"""Data models for node snapshots and rule findings."""

from .finding import Finding, Severity, combine, worse
from .node import Node

__all__ = [
    "Finding",
    "Node",
    "Severity",
    "combine",
    "worse",
]
