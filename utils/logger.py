"""
Logging Utilities for the SocialBu Client

Provides the colored console formatter and the helpers every module uses to
obtain a logger or configure application-wide logging.
"""

import logging
from typing import Optional

_installed_handlers = []


class CustomFormatter(logging.Formatter):
    """
    A custom formatter for logging messages with different log levels.

    Each level gets its own ANSI color; the message layout is shared.

    Usage:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter())
        logging.getLogger().addHandler(handler)
    """
    grey = "\x1b[37;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    dark_grey = "\x1b[30;1m"
    reset = "\x1b[0m"
    log_format = '[%(levelname)s] %(asctime)s - %(name)s - %(message)s'

    FORMATS = {
        logging.DEBUG: dark_grey + log_format + reset,
        logging.INFO: grey + log_format + reset,
        logging.WARNING: yellow + log_format + reset,
        logging.ERROR: red + log_format + reset,
        logging.CRITICAL: bold_red + log_format + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.log_format)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger.

    Handlers are configured once on the root logger by setup_file_logging(),
    so module loggers only propagate.
    """
    return logging.getLogger(name)


def setup_file_logging(log_file: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Configure root logging with a colored console handler and an optional file handler.

    Args:
        log_file: Path of the log file, or None for console only.
        level: Logging level applied to the root logger and its handlers.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Replace only the handlers installed by a previous call
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(CustomFormatter())
    root.addHandler(console)
    _installed_handlers.append(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter('[%(levelname)s] %(asctime)s - %(name)s - %(message)s')
        )
        root.addHandler(file_handler)
        _installed_handlers.append(file_handler)
