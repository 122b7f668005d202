"""Fixtures and configuration for pytest."""

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "subprocess: mark test as spawning an optimizer process"
    )
