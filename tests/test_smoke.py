"""Minimal smoke tests for the migration checker package."""


def test_package_importable() -> None:
    """Ensure the top-level package exposes the expected namespace."""
    import migration_checker  # noqa: F401  # Imported for side effects
