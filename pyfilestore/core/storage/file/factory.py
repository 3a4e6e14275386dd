"""Wiring of storage providers and the file manager from settings."""

from __future__ import annotations

from typing import Callable

from pyfilestore.config.settings import AppSettings, get_config_manager
from pyfilestore.logging.setup import get_logger

from .backend import StorageProvider
from .local_backend import LocalFileSystemProvider
from .manager import FileManager
from .naming import FileNameGenerator
from .validator import FileValidator


logger = get_logger(__name__)

ProviderFactory = Callable[[AppSettings], StorageProvider]


def _create_local_provider(settings: AppSettings) -> StorageProvider:
    return LocalFileSystemProvider(
        settings.local_file_system,
        create_directories=settings.file_manager.create_directory_if_not_exists,
    )


_PROVIDERS: dict[str, ProviderFactory] = {
    "local": _create_local_provider,
    # Name used by existing "LocalFileSystem" configurations
    "localfilesystem": _create_local_provider,
}


def register_storage_provider(name: str, factory: ProviderFactory) -> None:
    """
    Register a storage provider under a name usable in
    ``file_manager.default_storage_provider``.

    Args:
        name: Provider name (case-insensitive)
        factory: Callable building the provider from AppSettings
    """
    _PROVIDERS[name.lower()] = factory


def available_storage_providers() -> list[str]:
    return sorted(_PROVIDERS)


def create_storage_provider(settings: AppSettings) -> StorageProvider:
    """
    Build the storage provider selected by the settings.

    Raises:
        ValueError: If no provider is registered under the configured name
    """
    name = settings.file_manager.default_storage_provider.lower()
    factory = _PROVIDERS.get(name)
    if factory is None:
        raise ValueError(
            f"Unsupported storage provider: {name}. "
            f"Available: {', '.join(available_storage_providers())}")
    logger.debug(f"Creating storage provider '{name}'")
    return factory(settings)


def create_file_manager(settings: AppSettings | None = None) -> FileManager:
    """
    Build a FileManager with its validator, name generator and provider.

    Args:
        settings: Application settings; loaded through the ConfigManager
            when omitted

    Returns:
        Ready-to-use FileManager
    """
    if settings is None:
        settings = get_config_manager().settings

    policy = settings.file_manager
    return FileManager(
        storage_provider=create_storage_provider(settings),
        validator=FileValidator(policy),
        name_generator=FileNameGenerator(policy),
        settings=policy,
    )
