"""Fixtures and configuration for pytest."""

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "clang: mark test as requiring libclang")
