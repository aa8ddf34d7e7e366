import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from textual.logging import TextualHandler

from utils.config import Config


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the widest one seen so far, so messages line up."""

    longest_name_length = 14

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, initial_width
        )

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


_log_console = None


def _file_console(path: str) -> Console:
    # one console shared by every logger writing to the log file
    global _log_console
    if _log_console is None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        _log_console = Console(
            file=open(path, "a", encoding="utf-8"), width=120, soft_wrap=True
        )
    return _log_console


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger for the storefront.

    Records go to the Textual devtools console while the app runs (stderr
    otherwise). With STOREFRONT_LOG_FILE set they are also written to that
    file through a RichHandler, since stdout belongs to the TUI.
    """
    if name is None:
        name = "storefront"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        textual_handler = TextualHandler()
        textual_handler.setFormatter(formatter)
        textual_handler.setLevel(log_level)
        logger.addHandler(textual_handler)

        if Config.LOG_FILE:
            file_handler = RichHandler(
                console=_file_console(Config.LOG_FILE),
                show_time=True,
                show_level=True,
                show_path=False,
                rich_tracebacks=True,
                log_time_format="[%x %X]",
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level)
            logger.addHandler(file_handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
