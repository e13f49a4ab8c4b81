"""Helpers that turn raw nodes API payloads into service models."""

from .keys import strip_dot_num
from .node_normalizer import NodeNormalizationError, NodeNormalizer

__all__ = [
    "NodeNormalizationError",
    "NodeNormalizer",
    "strip_dot_num",
]
