"""
PyFileStore test configuration.

This module provides pytest fixtures shared by every test module:
- Isolation from PYFILESTORE_* environment variables
- Fresh configuration and logging singletons per test
"""

import os
import pytest

from pyfilestore.config.settings import ConfigManager
from pyfilestore.logging.setup import reset_logging


@pytest.fixture(scope="session", autouse=True)
def clear_env_vars():
    """
    Clear PYFILESTORE environment variables at session start.

    Variables exported by a developer shell or an .env file would otherwise
    leak into the settings under test.
    """
    original_values = {
        name: value for name, value in os.environ.items()
        if name.startswith("PYFILESTORE_")
    }
    for name in original_values:
        del os.environ[name]

    yield

    for name, value in original_values.items():
        os.environ[name] = value


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset config manager and logging before and after each test."""
    ConfigManager.reset_instance()
    reset_logging()
    yield
    ConfigManager.reset_instance()
    reset_logging()
