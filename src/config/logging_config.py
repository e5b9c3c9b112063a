# src/config/logging_config.py

"""Logging setup for the gold_watch scheduler.

The service runs unattended for weeks, waking twice a day. Every
process start gets its own file, ``logs/run_YYYYmmdd_HHMMSS.log``, that
collects all cycles of that process at DEBUG (including the rendered
report). The console shows cycle progress at ``Settings.CONSOLE_LOG_LEVEL``,
which is what a supervisor such as systemd or docker captures.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

PROJECT_LOGGER = "gold_watch"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Attach file and console handlers to the ``gold_watch`` logger.

    Safe to call more than once; handlers are only added the first time.

    Returns:
        The path of this process's log file.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)
    for handler in project_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(Settings.CONSOLE_LOG_LEVEL)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    project_logger.debug("Writing run log to %s", log_file)
    return log_file
