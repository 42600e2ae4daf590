"""
Logging configuration for fdb.

Quiet by default: only warnings reach stderr, so a successful invocation
prints nothing but its own output.
"""

import logging
import os
import sys
import warnings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _has_stderr_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
        for h in logger.handlers
    )


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to show only warnings and errors.

    Args:
        quiet: If True, suppress info/debug output. If False, leave levels alone.
    """
    if not quiet:
        return
    warnings.filterwarnings("ignore")
    logging.getLogger("fdb").setLevel(logging.WARNING)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not _has_stderr_handler(root_logger):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root_logger.addHandler(handler)

    logging.getLogger("fdb").setLevel(logging.DEBUG)


def configure_from_env():
    """Debug mode when FDB_VERBOSE=1, quiet otherwise."""
    if os.environ.get("FDB_VERBOSE") == "1":
        enable_debug_mode()
    else:
        configure_quiet_mode(quiet=True)
