"""
Logging configuration for ipcheck.

Console output goes to stderr so that command results on stdout stay
machine readable. A rotating log file can be added for debugging source
loading problems.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler


CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-24s | %(funcName)-20s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10485760  # 10MB
LOG_FILE_BACKUPS = 5


def configure_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """
    Configure the package logger for a CLI run.

    Args:
        debug: Log DEBUG and above to the console instead of WARNING
        log_file: Also write every record to this rotating file

    Returns:
        The "ipcheck" logger
    """
    logger = logging.getLogger("ipcheck")
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    # The file handler wants everything; the console handler filters
    logger.setLevel(logging.DEBUG if debug or log_file else logging.WARNING)
    logger.propagate = False
    return logger
