"""
Logging for the Ballot client.

Every module logger lives under the "ballot_client" namespace and propagates
to it, so the console handler is attached once, on that package logger.
Records go to stderr, which keeps `ballot status --json` output on stdout
clean. BALLOT_LOG_LEVEL sets the starting level; `--verbose` lowers it.
"""

import logging
import os
from typing import Optional, Union

PACKAGE_LOGGER = "ballot_client"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        root.addHandler(handler)

        level_str = os.getenv("BALLOT_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level_str, logging.INFO))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for a ballot_client module; the package handler is set up on first use."""
    root = _package_logger()
    if not name or name == PACKAGE_LOGGER:
        return root
    if not name.startswith(PACKAGE_LOGGER + "."):
        # Scripts outside the package still log through the package handler
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of every ballot_client logger at once."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _package_logger().setLevel(level)
