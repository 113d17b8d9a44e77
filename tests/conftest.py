"""Pytest configuration and fixtures for all tests."""
import pytest

from distbf import config


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the global filter configuration around every test."""
    config.reset_filter_config()
    yield
    config.reset_filter_config()


@pytest.fixture
def seed() -> bytes:
    """Round seed shared by both peers in a test."""
    return b"12345678901234567890123456789011"
