"""Tests for logging setup."""

import json
import logging

import pytest

from primo_client.infrastructure.logging_config import StructuredFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestStructuredFormatter:
    """Test JSON log formatting."""

    def test_format(self):
        record = logging.LogRecord(
            name="primo_client.test", level=logging.WARNING, pathname=__file__,
            lineno=10, msg="Record %s not found", args=("x",), exc_info=None,
        )
        record.extra_fields = {"record_id": "x"}

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "primo_client.test"
        assert data["message"] == "Record x not found"
        assert data["record_id"] == "x"


class TestSetupLogging:
    """Test root logger configuration."""

    def test_json_handler(self, restore_root_logger):
        setup_logging(use_json=True, log_level="debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_plain_handler(self, restore_root_logger):
        setup_logging(use_json=False, log_level="WARNING")

        assert restore_root_logger.level == logging.WARNING
        assert not isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)
