"""Simplified logger with color support, writing diagnostics to stderr."""

import os
import re
import sys
from typing import Dict, Optional, TextIO

__all__ = ["SimpleLogger", "LOG_LEVELS"]


class SimpleLogger:
    """Simplified logger with color support and minimal configuration."""

    # ANSI color codes
    COLORS: Dict[str, str] = {
        'red': "\x1b[31;1m",
        'green': "\x1b[32;1m",
        'yellow': "\x1b[33;1m",
        'blue': "\x1b[34;1m",
        'cyan': "\x1b[36;1m",
        'reset': "\x1b[0m"
    }

    # Log levels
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    def __init__(
        self,
        level: int = INFO,
        use_colors: bool | None = None,
        log_file: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.level = level
        self.stream = stream if stream is not None else sys.stderr
        self.use_colors = (
            self.stream.isatty() and os.environ.get("NO_COLOR") is None
            if use_colors is None
            else bool(use_colors)
        )
        self.file_handler = (
            open(log_file, "w", encoding="utf-8") if log_file else None
        )

    def _log(self, level: int, msg: str, *args, color: Optional[str] = None) -> None:
        if level < self.level:
            return

        if args:
            msg = msg % args

        if self.use_colors and color and color in self.COLORS:
            msg = f"{self.COLORS[color]}{msg}{self.COLORS['reset']}"

        print(msg, file=self.stream)

        # Mirror to the log file without colors
        if self.file_handler:
            clean_msg = re.sub(r'\x1b\[[0-9;]*m', '', msg)
            print(clean_msg, file=self.file_handler)
            self.file_handler.flush()

    def debug(self, msg: str, *args):
        self._log(self.DEBUG, msg, *args, color="cyan")

    def info(self, msg: str, *args):
        self._log(self.INFO, msg, *args)

    def warning(self, msg: str, *args):
        self._log(self.WARNING, msg, *args, color="yellow")

    def error(self, msg: str, *args):
        self._log(self.ERROR, msg, *args, color="red")

    # Color convenience methods
    def red(self, s: str) -> str:
        return self._colorize("red", s)

    def green(self, s: str) -> str:
        return self._colorize("green", s)

    def yellow(self, s: str) -> str:
        return self._colorize("yellow", s)

    def blue(self, s: str) -> str:
        return self._colorize("blue", s)

    def close(self):
        """Close file handler if it exists."""
        if self.file_handler:
            self.file_handler.close()
            self.file_handler = None

    # internal ----------------------------------------------------------
    def _colorize(self, color: str, s: str) -> str:
        return (
            f"{self.COLORS[color]}{s}{self.COLORS['reset']}" if self.use_colors else s
        )


LOG_LEVELS: Dict[str, int] = {
    "DEBUG": SimpleLogger.DEBUG,
    "INFO": SimpleLogger.INFO,
    "WARNING": SimpleLogger.WARNING,
    "ERROR": SimpleLogger.ERROR,
}
