"""Test logging configuration."""

import logging
import sys

import orjson
import pytest

from utils.logging import JsonFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonFormatter:
    """Test JSON rendering of log records."""

    def _record(self, **extra):
        record = logging.LogRecord("apps.harvester.pager", logging.INFO, __file__, 1, "Fetching page %d", (3,), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_core_fields(self):
        payload = orjson.loads(JsonFormatter().format(self._record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "apps.harvester.pager"
        assert payload["message"] == "Fetching page 3"
        assert "ts" in payload

    def test_extra_fields_merged(self):
        payload = orjson.loads(JsonFormatter().format(self._record(page=3, total=200)))

        assert payload["page"] == 3
        assert payload["total"] == 200

    def test_unserializable_extra_rendered_as_text(self):
        payload = orjson.loads(JsonFormatter().format(self._record(path=object())))

        assert payload["path"].startswith("<object object")

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = orjson.loads(JsonFormatter().format(record))

        assert "ValueError: boom" in payload["exc_info"]


class TestSetupLogging:
    """Test root logger configuration."""

    def test_json_handler(self, restore_root_logger):
        setup_logging(level="DEBUG", format_type="json")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_text_handler(self, restore_root_logger):
        setup_logging(level="WARNING", format_type="text")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            setup_logging(format_type="xml")

    def test_get_logger(self):
        assert get_logger("apps.harvester").name == "apps.harvester"
