"""Command-line interface package for the migration checker."""

from .app import build_parser, create_service, main, run

__all__ = [
    "build_parser",
    "create_service",
    "main",
    "run",
]
