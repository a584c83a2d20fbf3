# MIT License (see LICENSE)
"""
Logging configuration for grav.

Adds a TRACE level below DEBUG for per-pair and per-entity messages, and a
setup function mapping the CLI's level/mode names onto stdlib logging.
"""
from __future__ import annotations
import logging
from pathlib import Path

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "[%(levelname)s] [%(asctime)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "disabled": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

LOG_MODES = {
    "append": "a",
    "overwrite": "w",
}


def setup_logging(
    log_file: str | Path = "grav.log",
    log_level: str = "info",
    log_mode: str = "append",
) -> logging.Logger:
    """
    Set up logging for the ``grav`` logger hierarchy.

    Args:
        log_file: Path of the log file to write to.
        log_level: One of disabled, error, warning, info, debug, trace.
        log_mode: ``append`` to keep existing content, ``overwrite`` to truncate.

    Returns:
        The configured ``grav`` package logger.

    Raises:
        OSError: The log file cannot be opened.
    """
    level = LOG_LEVELS.get(log_level.lower(), TRACE)
    mode = LOG_MODES.get(log_mode.lower(), "w")

    logger = logging.getLogger("grav")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, mode=mode, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)
    logger.propagate = False

    return logger
