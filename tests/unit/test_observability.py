"""Unit tests for observability module."""

import io
import logging
import sys

import orjson
import pytest

from classroom_search.observability import JsonFormatter, bind_search_context, configure_logging, get_search_context


def _record(msg="test message", name="classroom_search.search.index", **extra):
    record = logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for structured JSON logging."""

    def test_format_emits_core_fields(self):
        payload = orjson.loads(JsonFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["message"] == "test message"
        assert payload["logger"] == "classroom_search.search.index"
        assert payload["component"] == "index"
        assert "timestamp" in payload

    def test_extra_fields_are_included(self):
        payload = orjson.loads(JsonFormatter().format(_record(records=3, fields=("name",))))

        assert payload["records"] == 3
        assert payload["fields"] == ["name"]

    def test_sensitive_fields_are_redacted(self):
        payload = orjson.loads(JsonFormatter().format(_record(token="abc", client_secret="xyz")))

        assert payload["token"] == "[REDACTED]"
        assert payload["client_secret"] == "[REDACTED]"

    def test_long_messages_are_truncated(self):
        payload = orjson.loads(JsonFormatter().format(_record(msg="x" * 3000)))

        assert len(payload["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3
        assert payload["message"].endswith("...")

    def test_unserializable_extras_fall_back(self):
        payload = orjson.loads(JsonFormatter().format(_record(kinds={"courses"}, error=ValueError("boom"))))

        assert payload["kinds"] == ["courses"]
        assert payload["error"] == "ValueError: boom"

    def test_exception_is_formatted(self):
        try:
            raise RuntimeError("failed")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        payload = orjson.loads(JsonFormatter().format(record))

        assert "RuntimeError: failed" in payload["exception"]

    def test_logger_without_dot_has_no_component(self):
        payload = orjson.loads(JsonFormatter().format(_record(name="root")))

        assert "component" not in payload


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_json_handler(self, restore_root_logger):
        configure_logging("debug", json_output=True)
        configure_logging("debug", json_output=True)

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_plain_output(self, restore_root_logger):
        configure_logging("warning", json_output=False)

        assert restore_root_logger.level == logging.WARNING
        assert not isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("chatty")

        assert restore_root_logger.level == logging.INFO

    def test_per_logger_overrides(self, restore_root_logger):
        configure_logging("info", logger_levels={"classroom_search.search": "error"})

        assert logging.getLogger("classroom_search.search").level == logging.ERROR
        logging.getLogger("classroom_search.search").setLevel(logging.NOTSET)

    def test_writes_to_given_stream(self, restore_root_logger):
        stream = io.StringIO()
        handler = configure_logging("info", stream=stream)

        logging.getLogger("classroom_search.cli").info("ready", extra={"records": 2})
        handler.flush()

        payload = orjson.loads(stream.getvalue().splitlines()[-1])
        assert payload["message"] == "ready"
        assert payload["records"] == 2


@pytest.mark.unit
class TestSearchContext:
    def test_bound_fields_appear_in_log_lines(self):
        with bind_search_context(kind="courses", query="biolgy"):
            payload = orjson.loads(JsonFormatter().format(_record()))

        assert payload["kind"] == "courses"
        assert payload["query"] == "biolgy"

    def test_nested_bindings_restore_outer_context(self):
        with bind_search_context(kind="courses"):
            with bind_search_context(query="lab"):
                assert get_search_context() == {"kind": "courses", "query": "lab"}
            assert get_search_context() == {"kind": "courses"}
        assert get_search_context() == {}

    def test_record_extras_override_context(self):
        with bind_search_context(query="outer"):
            payload = orjson.loads(JsonFormatter().format(_record(query="inner")))

        assert payload["query"] == "inner"

    def test_extra_redact_keys(self):
        formatter = JsonFormatter(redact_keys=["studentEmail"])
        payload = orjson.loads(formatter.format(_record(studentEmail="a@b.c")))

        assert payload["studentEmail"] == "[REDACTED]"
