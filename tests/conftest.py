"""Shared pytest fixtures for cellflow tests."""

import pytest

from cellflow import reset


@pytest.fixture(autouse=True)
def reset_root():
    """Reset the reactive root before each test to prevent state leakage."""
    reset()
    yield
    reset()
