"""Logging configuration for the storefront."""

import logging

_LOGGER_NAME = "lesson_booking"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger.

    Repeated calls only adjust the level. Unknown level names raise ValueError.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level.strip().upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
