# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import unittest
from unittest.mock import patch

from src.config.logging_config import setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the spot_tracker logger before each test."""
        root_logger = logging.getLogger("spot_tracker")
        root_logger.handlers.clear()

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        assert log_path is not None
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        assert log_path is not None
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_file_handler_level_debug(self) -> None:
        """File handler should be set to DEBUG level."""
        setup_logging()
        root_logger = logging.getLogger("spot_tracker")
        file_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)

    def test_console_handler_level_warning(self) -> None:
        """Console handler should be set to WARNING level."""
        setup_logging()
        root_logger = logging.getLogger("spot_tracker")
        stream_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        first = setup_logging()
        root_logger = logging.getLogger("spot_tracker")
        count_before = len(root_logger.handlers)
        second = setup_logging()
        self.assertEqual(count_before, len(root_logger.handlers))
        self.assertEqual(first, second)

    def test_log_file_inside_logs_dir(self) -> None:
        """Log file is created inside the logs/ directory."""
        log_path = setup_logging()
        assert log_path is not None
        self.assertEqual(log_path.parent.name, "logs")

    @patch(
        "src.config.logging_config._open_file_handler",
        return_value=None,
    )
    def test_read_only_falls_back_to_console(
        self, _mock_open: object,
    ) -> None:
        """Without a writable log dir, only an INFO console handler exists."""
        log_path = setup_logging()
        self.assertIsNone(log_path)
        root_logger = logging.getLogger("spot_tracker")
        self.assertEqual(len(root_logger.handlers), 1)
        handler = root_logger.handlers[0]
        self.assertNotIsInstance(handler, logging.FileHandler)
        self.assertEqual(handler.level, logging.INFO)

    def test_mkdir_oserror_is_tolerated(self) -> None:
        """An OSError while creating logs/ does not escape."""
        with patch(
            "src.config.logging_config.Path.mkdir",
            side_effect=OSError(30, "Read-only file system"),
        ):
            self.assertIsNone(setup_logging())


if __name__ == "__main__":
    unittest.main()
