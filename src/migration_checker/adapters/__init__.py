"""Adapter layer for talking to the cluster under evaluation."""

from .cluster_client import (
    NODES_INFO_PATH,
    NODES_STATS_PATH,
    ClusterClient,
    ClusterClientError,
)

__all__ = [
    "ClusterClient",
    "ClusterClientError",
    "NODES_INFO_PATH",
    "NODES_STATS_PATH",
]
