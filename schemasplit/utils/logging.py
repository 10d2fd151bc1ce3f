"""
schemasplit Logging Utilities - Session Logging for Schema Split Runs

Overview:
---------
Centralised logging configuration for schemasplit.  Every CLI run gets its
own log file tagged with a short session identifier so that the files written
and the documents skipped in one build can be traced after the fact, without
cluttering the build output that downstream code generators read.

Log Location:
-------------
- Default: ~/.schemasplit/logs/
- Each run creates a timestamped log file with session ID
- A symlink 'schemasplit.log' always points to the latest session
- Can be overridden via SCHEMASPLIT_LOG_DIR environment variable

Log File Format:
----------------
- schemasplit_YYYYMMDD_HHMMSS_<session_id>.log  (per-session files)
- schemasplit.log (symlink to latest)

Log Levels:
-----------
- DEBUG: Skipped files and the reason they were skipped
- INFO: Documents split and the files written for them
- WARNING: Output paths written more than once in a run
- ERROR: Write or delete failures that abort the run

Usage:
------
    from schemasplit.utils.logging import get_logger, setup_logging

    # Call once at startup (CLI entry point)
    log_file = setup_logging(level="DEBUG")

    # Get logger in any module
    logger = get_logger(__name__)
    logger.info("Splitting schemas...")
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

# ============================================================================
# Constants
# ============================================================================

DEFAULT_LOG_DIR = Path.home() / ".schemasplit" / "logs"
DEFAULT_LOG_LEVEL = "INFO"
SYMLINK_NAME = "schemasplit.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Detailed format for file logging (includes line numbers)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s:%(lineno)d | %(message)s"

_logging_initialised = False
_session_id: Optional[str] = None


# ============================================================================
# Session tagging - every record names the run that produced it
# ============================================================================

class SessionIdFilter(logging.Filter):
    """Add session_id to all log records."""

    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id  # type: ignore[attr-defined]
        return True


class SessionFormatter(logging.Formatter):
    """Formatter for records that bypassed the session filter (tagged N/A)."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id or "N/A"  # type: ignore[attr-defined]
        return super().format(record)


# ============================================================================
# Setup Functions
# ============================================================================

def generate_session_id() -> str:
    """Generate a short unique session ID (6 characters)."""
    return uuid.uuid4().hex[:6]


def get_log_directory() -> Path:
    """Get the log directory, respecting SCHEMASPLIT_LOG_DIR environment variable."""
    env_log_dir = os.getenv("SCHEMASPLIT_LOG_DIR")
    if env_log_dir:
        return Path(env_log_dir)
    return DEFAULT_LOG_DIR


def generate_log_filename(session_id: str) -> str:
    """Generate a timestamped log filename with session ID."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"schemasplit_{timestamp}_{session_id}.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console_output: bool = False,
    quiet: bool = False,
) -> Path:
    """
    Initialise schemasplit logging with a session file and optional console output.

    Each call creates a new timestamped log file with a unique session ID.
    A symlink 'schemasplit.log' is updated to point to the latest log file.

    Parameters
    ----------
    level : str, optional
        Log level: DEBUG, INFO, WARNING, ERROR. Defaults to INFO.
        Can also be set via SCHEMASPLIT_LOG_LEVEL environment variable.
    log_dir : Path, optional
        Directory for log files. Defaults to ~/.schemasplit/logs/
    console_output : bool
        If True, also log to stderr. Stdout is reserved for the list of
        written files. Default False.
    quiet : bool
        If True, suppress console output entirely. Default False.

    Returns
    -------
    Path
        Path to the log file being written to.
    """
    global _logging_initialised, _session_id

    _session_id = generate_session_id()

    if level is None:
        level = os.getenv("SCHEMASPLIT_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / generate_log_filename(_session_id)

    # Repeated CLI invocations in one process (tests, CliRunner) must not
    # stack handlers onto the package logger.
    pkg_logger = logging.getLogger("schemasplit")
    _reset(pkg_logger)
    pkg_logger.setLevel(log_level)
    pkg_logger.addFilter(SessionIdFilter(_session_id))

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(SessionFormatter(FILE_LOG_FORMAT, LOG_DATE_FORMAT))
    pkg_logger.addHandler(file_handler)

    # stdout carries the written paths; console logging goes to stderr only.
    if console_output and not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SessionFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        pkg_logger.addHandler(console_handler)

    pkg_logger.propagate = False
    _link_latest(log_dir, log_file)
    _logging_initialised = True

    pkg_logger.info(
        f"schemasplit session {_session_id} started at {datetime.now().isoformat()} "
        f"(level {level.upper()}, pid {os.getpid()}, cwd {Path.cwd()})"
    )
    return log_file


def _reset(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for f in logger.filters[:]:
        logger.removeFilter(f)


def _link_latest(log_dir: Path, log_file: Path) -> None:
    """Point ``schemasplit.log`` at *log_file*; best effort."""
    symlink_path = log_dir / SYMLINK_NAME
    try:
        if symlink_path.is_symlink() or symlink_path.exists():
            symlink_path.unlink()
        symlink_path.symlink_to(log_file.name)
    except OSError:
        # Unprivileged Windows accounts cannot create symlinks.
        pass


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Parameters
    ----------
    name : str
        Module name (typically __name__)

    Returns
    -------
    logging.Logger
        Logger instance under the ``schemasplit`` namespace
    """
    if not _logging_initialised:
        setup_logging()

    if name.startswith("schemasplit"):
        return logging.getLogger(name)
    return logging.getLogger(f"schemasplit.{name}")


def get_session_id() -> Optional[str]:
    """Return the current session ID, if logging is initialised."""
    return _session_id


# ============================================================================
# Logging Helper Functions - Structured Logging
# ============================================================================

def log_run_start(
    logger: logging.Logger,
    root_dir: Path,
    excluded: tuple[str, ...],
    workers: int,
    dry_run: bool,
) -> None:
    """Log the start of a split run."""
    logger.info("-" * 60)
    logger.info("SPLIT RUN START")
    logger.info(f"  Root: {root_dir}")
    logger.info(f"  Excluded: {', '.join(excluded) or '-'}")
    logger.info(f"  Workers: {workers}")
    if dry_run:
        logger.info("  Dry run: no files will be written or deleted")
    logger.info("-" * 60)


def log_run_complete(
    logger: logging.Logger,
    summary: dict,
    total_duration: Optional[float] = None,
) -> None:
    """Log the split run summary."""
    logger.info("-" * 60)
    logger.info("SPLIT RUN COMPLETE")
    logger.info(f"  JSON files scanned: {summary['scanned']}")
    logger.info(f"  Documents split: {summary['split']}")
    logger.info(f"  Skipped: {summary['skipped']}")
    logger.info(f"  Files written: {summary['written']}")
    if summary.get("collisions"):
        logger.info(f"  Collisions: {summary['collisions']}")
    if total_duration is not None:
        logger.info(f"  Duration: {total_duration:.2f}s")
    logger.info("-" * 60)
