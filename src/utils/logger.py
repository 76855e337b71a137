import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from textual.logging import TextualHandler

LOG_FILE = os.getenv("PORTAL_LOG_FILE")

_file_console = None


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


def _make_handler() -> logging.Handler:
    # the TUI owns the terminal, so console output goes to textual's devtools
    # unless a log file is configured
    global _file_console
    if LOG_FILE:
        if _file_console is None:
            _file_console = Console(file=open(LOG_FILE, "a", encoding="utf-8"), width=120)
        return RichHandler(
            console=_file_console,
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
    return TextualHandler()


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger for the given module name.
    Level is DEBUG when the DEBUG env var is set, INFO otherwise.
    """
    if name is None:
        name = "Default"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = _make_handler()
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
