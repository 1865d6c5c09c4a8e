"""
Unit tests for the package logger setup.
"""

import logging

import pytest

from ballot_client.shared.logging import (
    PACKAGE_LOGGER,
    get_logger,
    set_log_level,
)


@pytest.fixture
def package_level():
    root = logging.getLogger(PACKAGE_LOGGER)
    level = root.level
    yield root
    root.setLevel(level)


class TestGetLogger:
    def test_module_logger_propagates_to_package(self):
        logger = get_logger("ballot_client.ballot.refetch")
        assert logger.name == "ballot_client.ballot.refetch"
        assert logger.handlers == []
        assert logger.propagate is True

    def test_package_logger_has_one_handler(self):
        get_logger("ballot_client.ballot.guard")
        get_logger("ballot_client.ballot.service")
        assert len(logging.getLogger(PACKAGE_LOGGER).handlers) == 1

    def test_outside_name_is_nested(self):
        assert get_logger("streamlit_ui.app").name == "ballot_client.streamlit_ui.app"

    def test_default_is_package_logger(self):
        assert get_logger() is logging.getLogger(PACKAGE_LOGGER)


class TestSetLogLevel:
    def test_by_name(self, package_level):
        set_log_level("debug")
        assert get_logger("ballot_client.cli").getEffectiveLevel() == logging.DEBUG

    def test_unknown_name_falls_back_to_info(self, package_level):
        set_log_level("chatty")
        assert package_level.level == logging.INFO

    def test_by_number(self, package_level):
        set_log_level(logging.WARNING)
        assert package_level.level == logging.WARNING
