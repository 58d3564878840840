"""Process-wide logger used by the executors and adapters."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from nodechord.logging.logger import LogLevel, NodeChordLogger

if TYPE_CHECKING:
    from nodechord.core.config import EngineSettings

_logger: NodeChordLogger | None = None


def _level_from(settings: EngineSettings | None) -> LogLevel:
    if settings is None:
        from nodechord.core.config import get_settings

        settings = get_settings()
    return LogLevel(settings.log_level.lower())


def get_logger() -> NodeChordLogger:
    """Logger shared by every executor, created at the LOG_LEVEL setting on first use."""
    global _logger
    if _logger is None:
        _logger = NodeChordLogger(level=_level_from(None))
    return _logger


def configure_logging(
    level: LogLevel | str | None = None,
    *,
    settings: EngineSettings | None = None,
    enabled: bool = True,
    **kwargs: Any,
) -> NodeChordLogger:
    """Replace the shared logger.

    Args:
        level: Minimum level. When omitted, ``settings.log_level`` (or the
            process settings) decides.
        settings: Engine settings to read the level from.
        enabled: Whether anything is printed.
        **kwargs: Passed to NodeChordLogger (console, show_timestamps, ...).

    Example:
        >>> configure_logging("debug", show_timestamps=False)
        >>> get_logger().node_start("fetch", "http")
    """
    global _logger

    if level is None:
        level = _level_from(settings)
    elif isinstance(level, str):
        level = LogLevel(level.lower())

    _logger = NodeChordLogger(level=level, enabled=enabled, **kwargs)
    return _logger


def reset_logging() -> None:
    """Drop the shared logger so the next ``get_logger`` rereads settings."""
    global _logger
    _logger = None


def disable_logging() -> None:
    get_logger().enabled = False


def enable_logging() -> None:
    get_logger().enabled = True


@contextmanager
def logging_disabled() -> Iterator[NodeChordLogger]:
    """Silence the shared logger for a block, restoring its previous state."""
    logger = get_logger()
    previous = logger.enabled
    logger.enabled = False
    try:
        yield logger
    finally:
        logger.enabled = previous
