"""Tests for logging configuration."""

import logging

import pytest

from lesson_booking.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("lesson_booking")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_applies_level() -> None:
    logger = configure_logging(" debug ")

    assert logger.level == logging.DEBUG
    configure_logging("WARNING")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    configure_logging()


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging("chatty")
