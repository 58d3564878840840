"""NodeChord logger implementation."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Get numeric rank for comparison."""
        ranks = {"debug": 0, "info": 1, "warning": 2, "error": 3}
        return ranks[self.value]


class NodeChordLogger:
    """Structured logger for node execution.

    Provides Rich-formatted logging for node, LLM and tool activity.

    Example:
        >>> logger = NodeChordLogger(level=LogLevel.DEBUG)
        >>> logger.info("Resolving servers", node="scrape-1")
        >>> logger.node_start("scrape-1", "mcp")
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        console: Console | None = None,
        show_timestamps: bool = True,
        show_level: bool = True,
        enabled: bool = True,
    ) -> None:
        """Initialize logger.

        Args:
            level: Minimum log level to display.
            console: Rich console instance (created on stderr if None).
            show_timestamps: Whether to show timestamps.
            show_level: Whether to show log level.
            enabled: Whether logging is enabled.
        """
        self._level = level
        self._console = console or Console(stderr=True)
        self._show_timestamps = show_timestamps
        self._show_level = show_level
        self._enabled = enabled

    @property
    def level(self) -> LogLevel:
        """Current log level."""
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        self._level = value

    @property
    def enabled(self) -> bool:
        """Whether logging is enabled."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def _should_log(self, level: LogLevel) -> bool:
        return self._enabled and level.rank >= self._level.rank

    def _format_prefix(self, level: LogLevel) -> str:
        parts = []

        if self._show_timestamps:
            timestamp = datetime.now().strftime("%H:%M:%S")
            parts.append(f"[dim]{timestamp}[/]")

        if self._show_level:
            level_colors = {
                LogLevel.DEBUG: "dim",
                LogLevel.INFO: "blue",
                LogLevel.WARNING: "yellow",
                LogLevel.ERROR: "red bold",
            }
            color = level_colors.get(level, "white")
            parts.append(f"[{color}]{level.value.upper():7}[/]")

        return " ".join(parts)

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        if not self._should_log(level):
            return

        prefix = self._format_prefix(level)
        message = escape(message)
        if context:
            context_str = " ".join(f"[dim]{k}=[/]{escape(str(v))}" for k, v in context.items())
            message = f"{message} {context_str}"

        self._console.print(f"{prefix} {message}")

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **context)

    # Node-specific logging methods

    def node_start(self, node_id: str, node_type: str, name: str | None = None) -> None:
        """Log node start."""
        if not self._should_log(LogLevel.INFO):
            return

        label = f" ({escape(name)})" if name else ""
        self._console.print(
            f"{self._format_prefix(LogLevel.INFO)} "
            f"[bold blue]▶ {escape(node_id)}[/]{label} {node_type} starting"
        )

    def node_end(
        self,
        node_id: str,
        duration_ms: int,
        tokens: int | None = None,
        fallback: bool = False,
    ) -> None:
        """Log node completion."""
        if not self._should_log(LogLevel.INFO):
            return

        details = [f"{duration_ms}ms"]
        if tokens:
            details.append(f"{tokens:,} tokens")
        if fallback:
            details.append("fallback")

        self._console.print(
            f"{self._format_prefix(LogLevel.INFO)} "
            f"[bold green]✓ {escape(node_id)}[/] completed ({' | '.join(details)})"
        )

    def node_error(self, node_id: str, error: str) -> None:
        """Log node failure."""
        if not self._should_log(LogLevel.ERROR):
            return

        self._console.print(
            f"{self._format_prefix(LogLevel.ERROR)} "
            f"[bold red]✗ {escape(node_id)}[/] failed: {escape(error)}"
        )

    def llm_call(self, provider: str, model: str, tokens: int, duration_ms: int) -> None:
        """Log LLM API call."""
        if not self._should_log(LogLevel.DEBUG):
            return

        self._console.print(
            f"{self._format_prefix(LogLevel.DEBUG)} "
            f"  [dim]LLM:[/] {provider}/{escape(model)} | {tokens:,} tokens | {duration_ms}ms"
        )

    def tool_call(self, tool_name: str, success: bool, server: str | None = None) -> None:
        """Log tool call."""
        if not self._should_log(LogLevel.DEBUG):
            return

        status = "[green]✓[/]" if success else "[red]✗[/]"
        where = f" @ {escape(server)}" if server else ""

        self._console.print(
            f"{self._format_prefix(LogLevel.DEBUG)} "
            f"  [dim]Tool:[/] {escape(tool_name)}{where} {status}"
        )

    def fallback_used(self, node_id: str, reason: str) -> None:
        """Log substitution of synthetic output for a failed dependency."""
        if not self._should_log(LogLevel.WARNING):
            return

        self._console.print(
            f"{self._format_prefix(LogLevel.WARNING)} "
            f"[yellow]⚠ {escape(node_id)}[/] using fallback data: {escape(reason)}"
        )
