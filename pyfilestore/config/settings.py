"""
Configuration Manager for PyFileStore using Pydantic Settings.

This module provides the configuration surface of the file manager:
- Automatic config file discovery
- Environment variable override support with proper type conversion
- Configuration validation with clear error messages
- No circular dependencies with logging

Components never read the ConfigManager singleton themselves. The settings
sections defined here are immutable values handed to each component when it
is constructed (see pyfilestore.core.storage.file.factory).
"""

from __future__ import annotations

import os
import yaml
import logging
from typing import Any, ClassVar
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource


# Use basic logging during config initialization (before custom logger is
# set up)
_basic_logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MiB

DEFAULT_ALLOWED_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".pdf", ".doc", ".docx",
)


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and make sure it carries its leading dot."""
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


class FileManagerSettings(BaseModel):
    """
    Upload policy shared by the validator, the name generator and the manager.

    An empty ``default_allowed_extensions`` list is the open policy: any
    extension passes the extension check.
    """
    model_config = ConfigDict(frozen=True)

    default_storage_provider: str = Field(
        default="local",
        description="Name of the registered storage provider to use")
    default_max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        ge=0,
        description="Maximum upload size in bytes")
    default_allowed_extensions: tuple[str, ...] = Field(
        default=DEFAULT_ALLOWED_EXTENSIONS,
        description="Allowed extensions including the leading dot (empty = no restriction)")
    use_secure_naming: bool = Field(
        default=True,
        description="Replace caller file names with random identifiers")
    file_name_length: int = Field(
        default=32,
        ge=1,
        le=255,
        description="Length of the random part of generated file names")
    create_directory_if_not_exists: bool = Field(
        default=True,
        description="Create missing destination directories on save")
    strict_content_sniffing: bool = Field(
        default=False,
        description="Reject files whose leading bytes contradict their extension")

    @field_validator("default_allowed_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: Any) -> Any:
        # Environment variables arrive as ".jpg,.png"
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        return value

    @field_validator("default_allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(normalize_extension(ext) for ext in value if ext.strip())


class LocalFileSystemSettings(BaseModel):
    """
    Settings for the local filesystem storage provider.

    The storage root is ``content_root[/wwwroot]/root_path``. Temporary files
    used for atomic writes live in ``content_root/temp_path``.
    """
    model_config = ConfigDict(frozen=True)

    content_root: str = Field(
        default=".",
        description="Application content root directory")
    root_path: str = Field(
        default="uploads",
        description="Storage directory relative to the root directory")
    use_web_root: bool = Field(
        default=True,
        description="Place the storage directory under content_root/wwwroot")
    temp_path: str = Field(
        default="temp",
        description="Directory for in-flight writes, relative to content_root")


class LoggingSettings(BaseModel):
    """Logging configuration (raw dict for logging.config.dictConfig)."""
    version: int = Field(default=1)
    disable_existing_loggers: bool = Field(default=False)
    formatters: dict[str, Any] = Field(default_factory=dict)
    handlers: dict[str, Any] = Field(default_factory=dict)
    root: dict[str, Any] = Field(default_factory=dict)
    loggers: dict[str, Any] = Field(default_factory=dict)

    # Allow extra fields for logging config flexibility
    model_config = {'extra': 'allow'}


class AppSettings(BaseSettings):
    """
    Main application settings using Pydantic Settings.

    This class automatically:
    - Loads configuration from YAML files
    - Overrides values from environment variables
    - Validates all settings
    - Provides type-safe access to configuration

    Environment variables use the format: PYFILESTORE_SECTION__KEY
    Example: PYFILESTORE_FILE_MANAGER__USE_SECURE_NAMING=false
    """

    file_manager: FileManagerSettings = Field(
        default_factory=FileManagerSettings)
    local_file_system: LocalFileSystemSettings = Field(
        default_factory=LocalFileSystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="PYFILESTORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        # Allow extra fields for forward compatibility
        extra="ignore",
    )

    # Class variable to temporarily store YAML data
    _temp_config_data: ClassVar[dict[str, Any] | None] = None
    _temp_config_path: ClassVar[str | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize the sources and their priority for loading settings.

        Priority (highest to lowest):
        1. Environment variables (highest priority)
        2. YAML file data (if loaded via from_yaml)
        3. Init arguments and default values
        """
        class YamlSettingsSource(PydanticBaseSettingsSource):
            def get_field_value(
                    self, field: Any, field_name: str) -> tuple[Any, str, bool]:
                if cls._temp_config_data and field_name in cls._temp_config_data:
                    return cls._temp_config_data[field_name], field_name, False
                return None, field_name, False

            def __call__(self) -> dict[str, Any]:
                return cls._temp_config_data or {}

        return (
            env_settings,
            YamlSettingsSource(settings_cls),
            init_settings,
        )

    @classmethod
    def from_yaml(cls, config_path: str | None = None) -> 'AppSettings':
        """
        Load configuration from YAML file with fallback search strategy.

        Search order:
        1. PYFILESTORE_CONFIG_PATH environment variable (if set)
        2. ./config.yaml (project root)
        3. pyfilestore/config/config.yaml (package location)

        When no file is found at all, built-in defaults (plus environment
        overrides) are used.

        Note: Environment variables (PYFILESTORE_*) always override YAML values.

        Args:
            config_path: Explicit path to config file (skips search if provided)

        Returns:
            AppSettings instance

        Raises:
            FileNotFoundError: If an explicit config_path does not exist
            ValueError: If config file has invalid structure or values
        """
        if config_path is None:
            config_path = cls._find_config_file()

        config_data: dict[str, Any] = {}
        if config_path is None:
            _basic_logger.info(
                "No configuration file found, using defaults")
        else:
            _basic_logger.info(f"Loading configuration from: {config_path}")
            try:
                with open(config_path, "r") as f:
                    config_data = yaml.safe_load(f) or {}
            except FileNotFoundError:
                _basic_logger.error(
                    f"Configuration file not found: {config_path}")
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}\n"
                    f"Tried search paths: {cls._get_search_paths()}"
                )
            except yaml.YAMLError as e:
                _basic_logger.error(f"Invalid YAML in config file: {e}")
                raise ValueError(
                    f"Invalid YAML in configuration file {config_path}: {e}")

        cls._temp_config_data = config_data
        cls._temp_config_path = config_path

        try:
            settings = cls()
            _basic_logger.info(
                "Configuration loaded and validated successfully")
            return settings
        except ValidationError as e:
            _basic_logger.error(f"Configuration validation failed: {e}")
            raise ValueError(f"Configuration validation failed:\n{e}")
        finally:
            cls._temp_config_data = None
            cls._temp_config_path = None

    @staticmethod
    def _get_search_paths() -> list[str]:
        """Get list of paths to search for config file."""
        return [
            os.getenv("PYFILESTORE_CONFIG_PATH", ""),
            "./config.yaml",
            os.path.join(os.path.dirname(__file__), "config.yaml"),
        ]

    @classmethod
    def _find_config_file(cls) -> str | None:
        """
        Search for config file in multiple locations.

        Returns:
            Path to first found config file, or None
        """
        for path in cls._get_search_paths():
            if path and os.path.isfile(path):
                _basic_logger.debug(f"Found config file at: {path}")
                return path
        return None


class ConfigManager:
    """
    Singleton wrapper for AppSettings.

    Only the wiring code (factory, logging setup) talks to this class.
    """

    _instance: 'ConfigManager' | None = None
    _settings: AppSettings | None = None

    def __init__(self):
        """Initialize ConfigManager. Use get_instance() instead."""
        pass

    @classmethod
    def get_instance(cls) -> 'ConfigManager':
        """Get singleton instance of ConfigManager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._settings = None

    def load(self, config_path: str | None = None) -> AppSettings:
        """
        Load configuration from file.

        Settings already loaded are kept unless an explicit path is given.

        Args:
            config_path: Optional path to config file

        Returns:
            Validated settings
        """
        if self._settings is None or config_path is not None:
            ConfigManager._settings = AppSettings.from_yaml(config_path)
        return self._settings

    @property
    def settings(self) -> AppSettings:
        """Get the validated settings object, loading it on first access."""
        if self._settings is None:
            self.load()
        return self._settings


def get_config_manager() -> ConfigManager:
    """
    Get the ConfigManager singleton instance.

    Returns:
        ConfigManager instance
    """
    return ConfigManager.get_instance()


__all__ = [
    'ConfigManager',
    'AppSettings',
    'get_config_manager',
    'normalize_extension',
    'FileManagerSettings',
    'LocalFileSystemSettings',
    'LoggingSettings',
    'DEFAULT_MAX_FILE_SIZE',
    'DEFAULT_ALLOWED_EXTENSIONS',
]
