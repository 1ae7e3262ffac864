"""Tests for CLI logging setup."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from ipcheck.logging_config import configure_logging


class TestConfigureLogging:
    def test_console_only_by_default(self):
        logger = configure_logging()
        assert len(logger.handlers) == 1
        handler = logger.handlers[0]
        assert handler.stream is sys.stderr
        assert handler.level == logging.WARNING
        assert not logger.propagate

    def test_debug_lowers_console_level(self):
        logger = configure_logging(debug=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_log_file_gets_debug_records(self, tmp_path):
        log_file = tmp_path / "logs" / "ipcheck.log"
        logger = configure_logging(log_file=str(log_file))

        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1

        logging.getLogger("ipcheck.crawler.loader").debug("loaded 3 ranges")
        file_handlers[0].flush()
        assert "loaded 3 ranges" in log_file.read_text()

    def test_reconfiguring_replaces_handlers(self):
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1
