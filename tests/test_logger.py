"""Tests for logging setup, scoped context and workflow step events."""

import json
import logging
import sys
import tempfile
from pathlib import Path
from unittest import TestCase, main
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from emailbot.utils import logger as logger_module
from emailbot.utils.logger import configure_logging, get_logger, log_context, log_step


class TestLogging(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.log_file = Path(self._tmp.name) / "logs" / "run.jsonl"
        patcher = patch.object(logger_module, "VERBOSE_LOGGING", False)
        patcher.start()
        self.addCleanup(patcher.stop)
        configure_logging(level="INFO", log_file=self.log_file, force=True)

    def tearDown(self):
        for handler in logging.getLogger().handlers:
            handler.close()
        configure_logging(log_file=None, force=True)
        self._tmp.cleanup()

    def events(self):
        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = self.log_file.read_text(encoding="utf-8").splitlines()
        return {entry["event"]: entry for entry in map(json.loads, lines)}

    def test_jsonl_file_is_created(self):
        get_logger("emailbot.tests").info("started", run=1)

        entry = self.events()["started"]
        self.assertEqual(entry["run"], 1)
        self.assertEqual(entry["level"], "info")
        self.assertIn("timestamp", entry)

    def test_context_is_scoped_to_block(self):
        log = get_logger("emailbot.tests")
        with log_context(external_id="m-1"):
            log.info("inside")
        log.info("outside")

        events = self.events()
        self.assertEqual(events["inside"]["external_id"], "m-1")
        self.assertNotIn("external_id", events["outside"])

    def test_log_step_carries_component_and_payload(self):
        log_step("approval", "draft_approved", {"draft_id": "d-1"})

        entry = self.events()["draft_approved"]
        self.assertEqual(entry["component"], "approval")
        self.assertEqual(entry["event_kind"], "workflow_step")
        self.assertEqual(entry["data"], {"draft_id": "d-1"})

    def test_unwritable_log_dir_falls_back_to_console(self):
        blocker = Path(self._tmp.name) / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")

        configure_logging(log_file=blocker / "run.jsonl", force=True)

        self.assertEqual(len(logging.getLogger().handlers), 1)


class TestLevels(TestCase):
    def test_level_names_and_numbers(self):
        with patch.object(logger_module, "VERBOSE_LOGGING", False):
            self.assertEqual(logger_module._level("warning"), logging.WARNING)
            self.assertEqual(logger_module._level("10"), logging.DEBUG)
            self.assertEqual(logger_module._level(logging.ERROR), logging.ERROR)
            self.assertEqual(logger_module._level("chatty"), logging.INFO)

    def test_verbose_forces_debug(self):
        with patch.object(logger_module, "VERBOSE_LOGGING", True):
            self.assertEqual(logger_module._level("ERROR"), logging.DEBUG)


if __name__ == "__main__":
    main()
