"""Engine ("RUNE") and client ("APP") console loggers."""

from __future__ import annotations

import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

CORE_LOGGER_NAME = "RUNE"
CLIENT_LOGGER_NAME = "APP"

_FORMAT = "[%(asctime)s] %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"
_RESET = "\x1b[0m"
_COLOURS = {
    TRACE: "\x1b[37m",
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m\x1b[1m",
    logging.ERROR: "\x1b[31m\x1b[1m",
    logging.CRITICAL: "\x1b[1m\x1b[41m",
}


class _ConsoleFormatter(logging.Formatter):
    def __init__(self, use_colour: bool) -> None:
        super().__init__(_FORMAT, _DATE_FORMAT)
        self._use_colour = use_colour

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        colour = _COLOURS.get(record.levelno) if self._use_colour else None
        return f"{colour}{text}{_RESET}" if colour else text


class _ConsoleHandler(logging.StreamHandler):
    pass


def init() -> None:
    """Attach a console handler to both loggers and open them to every level."""
    stream = sys.stdout
    isatty = getattr(stream, "isatty", None)
    use_colour = bool(isatty and isatty())
    for name in (CORE_LOGGER_NAME, CLIENT_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if isinstance(h, _ConsoleHandler)]:
            logger.removeHandler(handler)
        handler = _ConsoleHandler(stream)
        handler.setFormatter(_ConsoleFormatter(use_colour))
        logger.addHandler(handler)
        logger.setLevel(TRACE)
        logger.propagate = False


def core_logger() -> logging.Logger:
    """The engine's own logger."""
    return logging.getLogger(CORE_LOGGER_NAME)


def client_logger() -> logging.Logger:
    """The logger for application code."""
    return logging.getLogger(CLIENT_LOGGER_NAME)