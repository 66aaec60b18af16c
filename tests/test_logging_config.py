import logging

import pytest

from fontmap.config import ENV_LOG_FILE, ENV_LOG_LEVEL
from fontmap.logging_config import LOGGER_NAME, resolve_level, setup_logging


@pytest.fixture
def package_logger(monkeypatch):
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    monkeypatch.delenv(ENV_LOG_FILE, raising=False)
    logger = logging.getLogger(LOGGER_NAME)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


def test_resolve_level():
    assert resolve_level(logging.WARNING) == logging.WARNING
    assert resolve_level(" debug ") == logging.DEBUG
    assert resolve_level("chatty") == logging.INFO


def test_repeated_setup_replaces_handlers(package_logger):
    setup_logging(logging.INFO)
    setup_logging(logging.INFO)
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.INFO


def test_environment_overrides_arguments(package_logger, monkeypatch, tmp_path):
    log_file = tmp_path / "fontmap.log"
    monkeypatch.setenv(ENV_LOG_LEVEL, "debug")
    monkeypatch.setenv(ENV_LOG_FILE, str(log_file))

    logger = setup_logging(logging.WARNING)
    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("fontmap.app.sync").debug("Fetching font map")
    for handler in logger.handlers:
        handler.flush()
    assert "fontmap.app.sync - DEBUG - Fetching font map" in log_file.read_text(encoding="utf-8")
