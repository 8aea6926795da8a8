"""
Logging configuration
"""

import logging
import os
from logging.handlers import RotatingFileHandler


LOGGER_NAME = 'torrentrpc'


def get_logger(name=None):
    """
    Get the package logger, or one of its children

    Args:
        name: Optional child name, e.g. 'deluge'

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def setup_logger(config):
    """
    Setup the torrentrpc logger

    Args:
        config: Application configuration with a 'logging' section

    Returns:
        Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.logging.level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if config.logging.console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.logging.file:
        log_dir = os.path.dirname(config.logging.file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            config.logging.file,
            maxBytes=config.logging.max_bytes,
            backupCount=config.logging.backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
