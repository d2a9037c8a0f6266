# Filename: src/fdtrace/log.py
"""Logging setup for the fdtrace application."""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape

# --- Define TRACE level ---
# Below DEBUG; the tracker logs each ignored syscall name once at this level
TRACE_LEVEL_NUM = 5
logging.addLevelName(TRACE_LEVEL_NUM, "TRACE")

LEVEL_NAMES = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RichConsoleHandler(logging.Handler):
    """A logging handler that prints level-coloured messages to a rich Console."""

    def __init__(self, console: Console):
        super().__init__()
        self.console = console
        formatter = logging.Formatter(
            "%(asctime)s %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord):
        """Formats the record and prints it with Rich markup based on level."""
        try:
            plain_msg = escape(f"{record.name}: {record.getMessage()}")
            timestamp = self.formatter.formatTime(record, self.formatter.datefmt)

            if record.levelno >= logging.CRITICAL:
                markup = f"{timestamp} [bold red]{plain_msg}[/bold red]"
            elif record.levelno >= logging.ERROR:
                markup = f"{timestamp} [red]{plain_msg}[/red]"
            elif record.levelno >= logging.WARNING:
                markup = f"{timestamp} [yellow]{plain_msg}[/yellow]"
            elif record.levelno >= logging.INFO:
                markup = f"{timestamp} [green]{plain_msg}[/green]"
            elif record.levelno >= logging.DEBUG:
                markup = f"{timestamp} [dim]{plain_msg}[/dim]"
            else:
                markup = f"{timestamp} [dim white on grey11]{plain_msg}[/]"

            self.console.print(markup, highlight=False, soft_wrap=True)
        except Exception:
            self.handleError(record)


def setup_logging(
    level_name: str = "WARNING",
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
):
    """
    Configures the root logger to print to stderr via rich and optionally
    to a plain text log file.
    """
    level_name_upper = level_name.upper()
    if level_name_upper == "TRACE":
        log_level = TRACE_LEVEL_NUM
    else:
        log_level = getattr(logging, level_name_upper, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers (e.g., from basicConfig in imports)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_formatter = logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)-25s %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = RichConsoleHandler(console or Console(stderr=True))
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(log_formatter)
            root_logger.addHandler(file_handler)
            logging.getLogger("fdtrace").info(f"Logging to file: {log_file}")
        except OSError as e:
            print(f"Error: Could not open log file '{log_file}': {e}", file=sys.stderr)

    logging.getLogger("fdtrace").debug(
        f"Logging configured at level {logging.getLevelName(log_level)}."
    )
