# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal.

    Returns:
        bool: ``True`` when ``sys.stdout`` reports TTY support, ``False`` otherwise.
    """

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def emoji(symbol: str, enable: bool) -> str:
    """Select an emoji symbol based on the caller's preference.

    Args:
        symbol: Emoji text to include in the output.
        enable: Flag indicating whether emoji output is desired.

    Returns:
        str: Emoji symbol when enabled, otherwise an empty string.
    """

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_color: bool | None = None,
    console: Console,
) -> None:
    """Render ``msg`` to the console using shared styling helpers.

    Args:
        msg: Message text to print to the console.
        style: Rich style name to apply when colour output is active.
        use_color: Optional explicit colour flag overriding TTY detection.
        console: Destination console.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def info(
    msg: str,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
    console: Console,
) -> None:
    """Emit an informational message."""

    prefix = emoji("ℹ️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="cyan", use_color=use_color, console=console)


def ok(
    msg: str,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
    console: Console,
) -> None:
    """Emit a success message."""

    prefix = emoji("✅ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="green", use_color=use_color, console=console)


def warn(
    msg: str,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
    console: Console,
) -> None:
    """Emit a warning message."""

    prefix = emoji("⚠️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="yellow", use_color=use_color, console=console)


def fail(
    msg: str,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
    console: Console,
) -> None:
    """Emit an error message."""

    prefix = emoji("❌ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="red", use_color=use_color, console=console)


@dataclass(slots=True)
class ConsoleLogger:
    """Logger handed explicitly to each pipeline stage.

    Stages never reach for a process-wide logger; the CLI (or a test) builds
    one instance and passes it to every constructor.
    """

    console: Console
    use_emoji: bool = True
    debug_enabled: bool = False
    use_color: bool | None = None
    _key_value_re: re.Pattern[str] = field(default=re.compile(r"([\w-]+)=(\".*?\"|\S+)"), repr=False)

    def info(self, message: str) -> None:
        """Log an informational message honouring emoji preferences.

        Args:
            message: Text describing progress.
        """

        info(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences.

        Args:
            message: Text describing the successful state.
        """

        ok(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences.

        Args:
            message: Text describing the warning condition.
        """

        warn(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences.

        Args:
            message: Text describing the failure state.
        """

        fail(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload rendered with simple key/value highlighting.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            text.append(raw_value, style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)


def build_logger(*, emoji: bool = True, debug: bool = False, no_color: bool = False) -> ConsoleLogger:
    """Return a ``ConsoleLogger`` configured for the provided preferences.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        ConsoleLogger: Logger instance bound to a dedicated Rich console.
    """

    console = Console(no_color=no_color, highlight=False, soft_wrap=True)
    return ConsoleLogger(
        console=console,
        use_emoji=emoji,
        debug_enabled=debug,
        use_color=False if no_color else None,
    )


__all__ = [
    "ConsoleLogger",
    "build_logger",
    "detect_tty",
    "emoji",
    "fail",
    "info",
    "ok",
    "warn",
]
