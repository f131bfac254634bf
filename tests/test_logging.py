"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

import structlog

from ollama_vision_chat.logging_utils import build_formatter, configure_logging
from ollama_vision_chat.models import Message, Role
from ollama_vision_chat.store import ConversationStore


class StructuredFormatterTests(unittest.TestCase):
    """Validate log format and domain event emission."""

    def test_json_formatter_includes_structured_fields(self) -> None:
        formatter = build_formatter(structured=True)
        record = logging.LogRecord(
            name="ollama_vision_chat.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="pipeline.send.start",
            args=(),
            exc_info=None,
        )
        record.message_id = 42
        record.has_image = True

        data = json.loads(formatter.format(record))
        self.assertEqual(data["event"], "pipeline.send.start")
        self.assertEqual(data["message_id"], 42)
        self.assertTrue(data["has_image"])
        self.assertEqual(data["level"], "info")

    def test_store_append_emits_debug_event(self) -> None:
        store = ConversationStore()
        with self.assertLogs("ollama_vision_chat.store", level="DEBUG") as logs:
            store.append(Message(id=1, role=Role.USER, text="hi"))
        self.assertTrue(any("store.append" in line for line in logs.output))


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._original_handlers:
                handler.close()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def _stream_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]

    def test_configure_logging_adds_stderr_handler(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(len(self._stream_handlers()), 1)

    def test_structured_uses_structlog_formatter(self) -> None:
        configure_logging({"level": "DEBUG", "structured": True, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertTrue(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_plain_formatter_when_not_structured(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        formatters = [h.formatter for h in logging.getLogger().handlers]
        self.assertFalse(
            any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)
        )

    def test_sets_root_level(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_stderr_handler_never_goes_below_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(self._stream_handlers()[0].level, logging.WARNING)

    def test_noisy_loggers_set_to_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        for name in ("httpx", "httpcore", "ollama"):
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    def test_file_handler_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = str(Path(tmp) / "logs" / "test.log")
            configure_logging(
                {
                    "level": "DEBUG",
                    "structured": False,
                    "log_to_file": True,
                    "log_file_path": log_path,
                }
            )
            file_handlers = [
                h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
            ]
            self.assertEqual(len(file_handlers), 1)
            self.assertTrue(Path(log_path).exists())
            for handler in file_handlers:
                handler.close()

    def test_stderr_handler_filters_to_app_loggers(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        handler = self._stream_handlers()[0]
        app_record = logging.LogRecord(
            name="ollama_vision_chat.pipeline",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="ok",
            args=(),
            exc_info=None,
        )
        other_record = logging.LogRecord(
            name="httpx",
            level=logging.WARNING,
            pathname="",
            lineno=0,
            msg="noise",
            args=(),
            exc_info=None,
        )
        self.assertTrue(handler.filter(app_record))
        self.assertFalse(handler.filter(other_record))


if __name__ == "__main__":
    unittest.main()
