"""Tests for logging setup."""

import logging

import pytest
from pythonjsonlogger import jsonlogger

from nature_remo_exporter.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_json_format(restore_root_logger):
    setup_logging("DEBUG", "json")

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_text_format_replaces_handlers(restore_root_logger):
    setup_logging("INFO", "json")
    setup_logging("WARNING", "text")

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert not isinstance(restore_root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
