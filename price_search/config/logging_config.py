# price_search/config/logging_config.py

"""Per-run logging for price_search.

Every CLI invocation writes ``logs/run_<timestamp>.log`` with full detail
from all ``price_search.*`` loggers: relay attempts, extraction decisions,
per-source scrape failures with tracebacks. Stderr only shows records at
the console level (``PRICE_SEARCH_LOG_LEVEL``, WARNING by default, INFO
with ``--verbose``) so JSON on stdout stays clean.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from price_search.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _active_log_file(logger: logging.Logger) -> Path | None:
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(verbose: bool = False) -> Path:
    """Attach the run file and stderr handlers to ``price_search``.

    Idempotent: once configured, later calls return the log file already
    in use and leave the handlers untouched.
    """
    project_logger = logging.getLogger("price_search")
    project_logger.setLevel(logging.DEBUG)

    active = _active_log_file(project_logger)
    if active is not None:
        return active

    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Settings.LOGS_DIR / f"run_{stamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )
    project_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.INFO if verbose else Settings.CONSOLE_LOG_LEVEL
    )
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    project_logger.addHandler(console_handler)

    project_logger.debug("Run log opened at %s", log_file)
    return log_file
