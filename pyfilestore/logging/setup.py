"""
Logging for pyfilestore.

Every module logs through a plain child of the ``pyfilestore`` logger. The
library never attaches handlers or sets levels on those loggers; records
propagate to whatever the application configured. Applications that keep
their logging setup in the pyfilestore settings file can apply it with
``setup_logging``:

    settings = get_config_manager().settings
    setup_logging(settings)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from pyfilestore.config.settings import AppSettings, LoggingSettings, get_config_manager
from pyfilestore.logging.log_manager import LogManager


PACKAGE_LOGGER = "pyfilestore"

# No "No handlers could be found" noise when the application configures nothing
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

LoggingConfig = Union[AppSettings, LoggingSettings, Mapping[str, Any]]

_log_manager: LogManager | None = None


def _as_dict_config(config: LoggingConfig | None) -> dict[str, Any]:
    if config is None:
        config = get_config_manager().settings
    if isinstance(config, AppSettings):
        config = config.logging
    if isinstance(config, LoggingSettings):
        return config.model_dump()
    return dict(config)


def setup_logging(config: LoggingConfig | None = None) -> LogManager:
    """
    Apply a logging configuration once per process.

    Args:
        config: Application settings, their ``logging`` section or a raw
            ``logging.config.dictConfig`` mapping. When omitted the settings
            are loaded through the ConfigManager.

    Returns:
        The active LogManager; later calls return it unchanged
    """
    global _log_manager

    logger = get_logger(__name__)
    if _log_manager is not None:
        logger.warning("Logging already configured, skipping re-initialization")
        return _log_manager

    _log_manager = LogManager.get_instance(_as_dict_config(config))
    logger.info("Logging system initialized")
    return _log_manager


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


def is_logging_configured() -> bool:
    return _log_manager is not None


def reset_logging():
    """Forget the applied configuration (for testing)."""
    global _log_manager
    _log_manager = None
    LogManager.reset_instance()
