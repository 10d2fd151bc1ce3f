"""
schemasplit Utilities Package - Cross-Cutting Helpers

Helpers reused by the CLI and the split driver without importing heavier
dependencies at package load time.  Currently this is the session logging
setup shared by every module.
"""

from .logging import (
    setup_logging,
    get_logger,
    get_session_id,
    log_run_start,
    log_run_complete,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_session_id",
    "log_run_start",
    "log_run_complete",
]
