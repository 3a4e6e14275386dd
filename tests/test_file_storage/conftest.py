"""Fixtures for file storage tests."""

from __future__ import annotations

import io
from unittest.mock import AsyncMock, Mock

import pytest

from pyfilestore.config.settings import FileManagerSettings, LocalFileSystemSettings
from pyfilestore.core.storage.file.backend import StorageProvider
from pyfilestore.core.storage.file.local_backend import LocalFileSystemProvider
from pyfilestore.core.storage.file.manager import FileManager
from pyfilestore.core.storage.file.naming import FileNameGenerator
from pyfilestore.core.storage.file.validator import FileValidator

from file_samples import png_bytes


@pytest.fixture
def settings():
    """Default upload policy."""
    return FileManagerSettings()


@pytest.fixture
def local_settings(tmp_path):
    """Local provider rooted in a temporary content root."""
    return LocalFileSystemSettings(
        content_root=str(tmp_path),
        root_path="uploads",
        use_web_root=True,
        temp_path="temp",
    )


@pytest.fixture
def storage_root(tmp_path):
    """Directory the local provider stores files in."""
    return tmp_path / "wwwroot" / "uploads"


@pytest.fixture
def provider(local_settings):
    """LocalFileSystemProvider instance."""
    return LocalFileSystemProvider(local_settings)


@pytest.fixture
def validator(settings):
    return FileValidator(settings)


@pytest.fixture
def name_generator(settings):
    return FileNameGenerator(settings)


@pytest.fixture
def diagnostics():
    """Logger double standing in for the diagnostics sink."""
    return Mock()


@pytest.fixture
def manager(provider, validator, name_generator, settings, diagnostics):
    """FileManager over the local provider."""
    return FileManager(provider, validator, name_generator, settings, logger=diagnostics)


@pytest.fixture
def mock_provider():
    """Storage provider double with async methods."""
    return AsyncMock(spec=StorageProvider)


@pytest.fixture
def mock_manager(mock_provider, validator, name_generator, settings, diagnostics):
    """FileManager over a mocked provider."""
    return FileManager(mock_provider, validator, name_generator, settings, logger=diagnostics)


@pytest.fixture
def png_stream():
    """2 KB stream starting with the PNG signature."""
    return io.BytesIO(png_bytes())
