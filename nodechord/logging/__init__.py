"""Logging module for NodeChord.

Provides structured logging with Rich console support.
"""

from nodechord.logging.logger import LogLevel, NodeChordLogger
from nodechord.logging.config import (
    configure_logging,
    disable_logging,
    enable_logging,
    get_logger,
    logging_disabled,
    reset_logging,
)

__all__ = [
    "LogLevel",
    "NodeChordLogger",
    "get_logger",
    "configure_logging",
    "disable_logging",
    "enable_logging",
    "logging_disabled",
    "reset_logging",
]
