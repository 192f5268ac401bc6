# src/config/logging_config.py

"""Per-run logging for currency_flow.

Every launch writes ``logs/run_YYYYMMDD_HHMMSS.log`` and every
``currency_flow.*`` logger propagates into it.  The stderr handler is
optional: the Textual TUI owns the terminal, so it runs file-only,
while the headless CLI also echoes warnings to stderr.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "currency_flow"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_level() -> int:
    """Resolve the file handler level from ``FX_LOG_LEVEL`` (default DEBUG)."""
    name = os.getenv("FX_LOG_LEVEL", "DEBUG").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def setup_logging(console: bool = True) -> Path:
    """Attach the per-run file handler (and optionally stderr) once.

    Returns:
        Path of the log file for this run.  Repeated calls return a new
        path but leave the already-configured handlers untouched.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(_file_level())
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)

    root_logger.info("Logging to %s (console=%s)", log_file, console)
    return log_file
