import logging
import os

from rich.console import Console
from rich.logging import RichHandler

# every handler writes through this console, so the tui can move all logging
# into a file before the screen is taken over
_console = Console(stderr=True)
_log_file = None


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        width = CenteredFormatter.longest_name_length
        # work on a copy, the same record also reaches other handlers
        record = logging.makeLogRecord(record.__dict__)
        record.name = record.name.center(width)
        return super().format(record)


def use_log_file(path: str) -> None:
    """
    Redirect all loggers created by get_logger to `path` (appending).
    Used by the Textual client, stderr belongs to the UI there.
    """
    global _log_file
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    if _log_file is not None:
        _log_file.close()
    _log_file = open(path, "a", encoding="utf-8")
    _console.file = _log_file


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    Level is DEBUG when the DEBUG env var is set, INFO otherwise.
    """
    if name is None:
        name = "tienda"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=_console,
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
