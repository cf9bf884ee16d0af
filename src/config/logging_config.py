# src/config/logging_config.py

"""Per-run timestamped logging configuration for the spot price tracker.

Each collection or aggregation run creates a dedicated log file inside
``logs/``, named with the launch timestamp (e.g.
``logs/run_20260214_153045.log``).  All ``spot_tracker.*`` loggers route
through this file handler so that every module's output lands in the
same per-run log.

Scheduled containers often mount the application directory read-only.
When the log file cannot be created, logging degrades to the console
alone and the run carries on.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

# Reusable format strings --------------------------------------------------

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _open_file_handler(log_file: Path) -> logging.FileHandler | None:
    """Create the per-run file handler, or ``None`` if the disk refuses."""
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        return None


def setup_logging() -> Path | None:
    """Initialise the root ``spot_tracker`` logger for the current run.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run,
        or ``None`` when only console logging could be set up.
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Settings.LOGS_DIR / f"run_{timestamp}.log"

    # --- Root project logger -----------------------------------------------
    root_logger = logging.getLogger("spot_tracker")
    root_logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers on repeated calls (e.g. tests)
    if root_logger.handlers:
        file_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        return Path(file_handlers[0].baseFilename) if file_handlers else None

    file_handler = _open_file_handler(log_file)

    # --- Console handler – WARNING+, or INFO+ when there is no file --------
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.WARNING if file_handler else logging.INFO
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(console_handler)

    if file_handler is None:
        root_logger.warning(
            "Log directory %s is not writable; logging to console only",
            Settings.LOGS_DIR,
        )
        return None

    # --- File handler (DEBUG+) – captures everything -----------------------
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(file_handler)

    root_logger.info(
        "Logging initialised, log file: %s", log_file
    )

    return log_file
