"""Tests for logging setup."""

import io
import logging

import pytest
import yaml

from pyfilestore.config.settings import AppSettings, FileManagerSettings, LoggingSettings
from pyfilestore.core.storage.file.models import UploadRequest
from pyfilestore.core.storage.file.validator import FileValidator
from pyfilestore.logging.log_manager import LogManager
from pyfilestore.logging.setup import (
    PACKAGE_LOGGER,
    get_logger,
    is_logging_configured,
    setup_logging,
)


@pytest.fixture
def file_logging_config(tmp_path):
    """Logging config writing one named logger to a file in a new directory."""
    log_file = tmp_path / "logs" / "pyfilestore.log"
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(levelname)s %(name)s %(message)s"},
        },
        "handlers": {
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_file),
                "formatter": "standard",
                "level": "INFO",
            },
        },
        "loggers": {
            "pyfilestore.test": {
                "level": "INFO",
                "handlers": ["file"],
                "propagate": False,
            },
        },
    }
    yield config, log_file

    test_logger = logging.getLogger("pyfilestore.test")
    for handler in list(test_logger.handlers):
        handler.close()
        test_logger.removeHandler(handler)


@pytest.fixture
def restore_root_level():
    """Put the root logger level back after a test changes it."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_get_logger_before_setup():
    """Module loggers carry no handlers or levels of their own."""
    assert not is_logging_configured()

    logger = get_logger("pyfilestore.early")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "pyfilestore.early"
    assert logger.handlers == []
    assert logger.level == logging.NOTSET
    assert any(isinstance(h, logging.NullHandler)
               for h in logging.getLogger(PACKAGE_LOGGER).handlers)


def test_setup_logging_creates_log_directory(file_logging_config):
    """File handler directories are created before dictConfig runs."""
    config, log_file = file_logging_config

    setup_logging(config)

    assert is_logging_configured()
    assert log_file.parent.is_dir()

    logger = get_logger("pyfilestore.test")
    logger.info("stored something")
    for handler in logger.handlers:
        handler.flush()

    assert "stored something" in log_file.read_text()


def test_setup_logging_only_once(file_logging_config):
    """A second setup call keeps the first LogManager."""
    config, _ = file_logging_config

    first = setup_logging(config)
    second = setup_logging({"version": 1, "root": {"level": "DEBUG"}})

    assert second is first
    assert LogManager.get_instance() is first


def test_setup_logging_from_settings(restore_root_level):
    """The logging section of AppSettings is applied directly."""
    settings = AppSettings(logging=LoggingSettings(root={"level": "WARNING"}))

    manager = setup_logging(settings)

    assert manager.logger_settings["root"] == {"level": "WARNING"}
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_from_logging_section(restore_root_level):
    """A LoggingSettings section is accepted on its own."""
    setup_logging(LoggingSettings(root={"level": "ERROR"}))

    assert logging.getLogger().level == logging.ERROR


def test_setup_logging_loads_configuration(tmp_path, monkeypatch, restore_root_level):
    """Without arguments the configuration file is loaded."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({"logging": {"root": {"level": "ERROR"}}}))
    monkeypatch.setenv("PYFILESTORE_CONFIG_PATH", str(config_path))

    setup_logging()

    assert logging.getLogger().level == logging.ERROR


def test_debug_reaches_module_loggers(restore_root_level):
    """A DEBUG root configuration makes module debug records visible."""
    setup_logging({
        "version": 1,
        "disable_existing_loggers": False,
        "root": {"level": "DEBUG"},
    })

    validator_logger = logging.getLogger("pyfilestore.core.storage.file.validator")

    assert validator_logger.handlers == []
    assert validator_logger.getEffectiveLevel() == logging.DEBUG


def test_debug_records_propagate(caplog):
    """Debug records from the pipeline reach the application's handlers."""
    validator = FileValidator(FileManagerSettings(default_allowed_extensions=[]))
    request = UploadRequest(content=io.BytesIO(b"data"), file_name="tool.exe")

    with caplog.at_level(logging.DEBUG):
        assert validator.validate(request).is_valid

    assert "No extension restriction" in caplog.text


def test_invalid_logging_config_falls_back():
    """A broken config falls back to basic logging instead of raising."""
    manager = LogManager({"handlers": {"bad": {"class": "no.such.Handler"}}})

    assert "bad" in manager.logger_settings["handlers"]


def test_empty_logging_config_is_accepted():
    """Empty settings leave the logging module untouched."""
    manager = setup_logging({})

    assert is_logging_configured()
    assert manager.logger_settings == {}
