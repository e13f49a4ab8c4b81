"""Upgrade compatibility checks for a running cluster's node configuration."""

from .models import Finding, Node, Severity, combine, worse

__all__ = [
    "Finding",
    "Node",
    "Severity",
    "combine",
    "worse",
]
