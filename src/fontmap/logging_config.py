"""
Logging Configuration
=====================
Attaches the handlers of the 'fontmap' logger.

Modules log through `logging.getLogger(__name__)`, so everything below the
package name ends up here, including the pipeline's stderr that
`fontmap.app.pipeline` forwards line by line.
"""
import logging
import os
import sys
from typing import Optional, Union

from fontmap.config import ENV_LOG_FILE, ENV_LOG_LEVEL

LOGGER_NAME = "fontmap"

# Format: Time - Module - Level - Message
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Accept a level number or a name such as 'debug'. Unknown names give INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger with a stdout handler and an optional file.

    FONTMAP_LOG_LEVEL and FONTMAP_LOG_FILE take precedence over the arguments.

    Args:
        level: Logging level, as a number or a level name.
        log_file: Optional path the log is appended to.

    Returns:
        The 'fontmap' logger.
    """
    level = resolve_level(os.environ.get(ENV_LOG_LEVEL) or level)
    log_file = os.environ.get(ENV_LOG_FILE) or log_file

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # a second call replaces the handlers of the first one
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    target = f" and '{log_file}'" if log_file else ""
    logger.info(f"Logging at {logging.getLevelName(level)} to stdout{target}.")
    return logger
