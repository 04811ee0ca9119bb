"""Tests for JSON log formatting."""

import json
import logging

from jwsjson.logging_config import JsonFormatter, configure_logging


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("jwsjson.jws.verify", logging.WARNING, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


class TestJsonFormatter:

    def test_basic_fields(self):
        out = json.loads(JsonFormatter().format(make_record("signature entry check failed")))
        assert out["level"] == "WARNING"
        assert out["logger"] == "jwsjson.jws.verify"
        assert out["msg"] == "signature entry check failed"
        assert "ts" in out

    def test_extras_included(self):
        out = json.loads(JsonFormatter().format(make_record("x", route="/verify", code="JWS_INVALID_KEY")))
        assert out["route"] == "/verify"
        assert out["code"] == "JWS_INVALID_KEY"

    def test_unknown_extras_ignored(self):
        out = json.loads(JsonFormatter().format(make_record("x", secret="k")))
        assert "secret" not in out


class TestConfigureLogging:

    def test_file_handler_when_configured(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            log_file = tmp_path / "jws.log"
            configure_logging(log_file=str(log_file), log_level="debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2
            logging.getLogger("jwsjson.test").debug("written")
            for handler in root.handlers:
                handler.flush()
            line = log_file.read_text().strip().splitlines()[-1]
            assert json.loads(line)["msg"] == "written"
        finally:
            for handler in root.handlers:
                if handler not in saved_handlers:
                    handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_console_only_by_default(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(log_level="INFO")
            assert len(root.handlers) == 1
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
