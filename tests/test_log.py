"""Tests for the logging helpers."""

import logging

from src.pathtracer.core.log import PACKAGE_LOGGER, get_logger, set_log_level


class TestGetLogger:
    """Tests for get_logger()."""

    def test_single_handler(self):
        first = get_logger("src.pathtracer.test_single_handler")
        second = get_logger("src.pathtracer.test_single_handler")
        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False

    def test_explicit_level(self):
        logger = get_logger("src.pathtracer.test_explicit_level", level=logging.ERROR)
        assert logger.level == logging.ERROR


class TestSetLogLevel:
    """Tests for set_log_level()."""

    def test_applies_to_existing_and_new_loggers(self):
        existing = get_logger("src.pathtracer.test_existing")
        try:
            set_log_level(logging.WARNING)
            assert existing.level == logging.WARNING
            assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

            later = get_logger("src.pathtracer.test_created_later")
            assert later.getEffectiveLevel() == logging.WARNING
        finally:
            set_log_level(logging.NOTSET)

    def test_leaves_other_loggers_alone(self):
        other = logging.getLogger("someotherlib")
        other.setLevel(logging.INFO)
        set_log_level(logging.ERROR)
        try:
            assert other.level == logging.INFO
        finally:
            set_log_level(logging.NOTSET)
