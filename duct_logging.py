"""
Logging Configuration
Sets up the 'ductulator' logger for the app and its calculation modules.
"""
import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "ductulator"
LEVEL_ENV = "DUCTULATOR_LOG_LEVEL"
FILE_ENV = "DUCTULATOR_LOG_FILE"


def level_from_env(default: int = logging.INFO) -> int:
    """Read the log level name from DUCTULATOR_LOG_LEVEL (e.g. 'DEBUG')."""
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(level: Union[int, None] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the 'ductulator' logger.

    Args:
        level: Logging level; defaults to DUCTULATOR_LOG_LEVEL or INFO.
        log_file: Optional path to save logs to; defaults to DUCTULATOR_LOG_FILE.
    """
    if level is None:
        level = level_from_env()
    if log_file is None:
        log_file = os.environ.get(FILE_ENV) or None

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Streamlit re-executes the script on every interaction
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
