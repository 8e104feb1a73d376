"""Shared fixtures."""

import pytest

from expressivetext.registry import default_registry


@pytest.fixture(autouse=True)
def restore_default_patterns():
    """Undo pattern changes made to the process-wide registry."""
    yield
    default_registry.reset()
