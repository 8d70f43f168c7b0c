"""
Logging Configuration
Library loggers live under the ``mpesa_sdk`` namespace and stay silent
until the application opts in with configure_logging().
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

ROOT_LOGGER_NAME = 'mpesa_sdk'

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the library namespace

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger whose records propagate to the ``mpesa_sdk`` logger
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + '.'):
        name = f'{ROOT_LOGGER_NAME}.{name}'
    return logging.getLogger(name)


def configure_logging(
        level: Union[int, str] = logging.INFO,
        log_dir: Optional[str] = None
) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the library logger

    Args:
        level: Log level for the library logger and its handlers
        log_dir: Directory for ``mpesa-sdk.log``; created if missing

    Returns:
        The configured ``mpesa_sdk`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    # Only configure if not already configured
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    ))
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'mpesa-sdk.log'),
            maxBytes=10485760,  # 10MB
            backupCount=10
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger
