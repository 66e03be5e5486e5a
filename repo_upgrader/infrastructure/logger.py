"""
Package-wide logger for repo-upgrader.
"""

import logging


LOGGER_NAME = "repo_upgrader"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _build_logger() -> logging.Logger:
    _logger = logging.getLogger(LOGGER_NAME)
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)
    return _logger


logger = _build_logger()


__all__ = [
    "LOGGER_NAME",
    "logger",
]
