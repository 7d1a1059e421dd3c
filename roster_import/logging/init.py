from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for the importer: one line per record, "<LABEL> <message>".

Labels are INFO, WARN, ERROR and SUMMARY (a custom level between INFO and
WARNING that carries the machine-greppable result line). Everything is
attached to the package logger "roster_import"; modules log through
logging.getLogger(__name__) and reach the same handler.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "roster_import"
SUMMARY_LEVEL = 25

LEVEL_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_HANDLER_MARK = "_roster_import_console"
_configured = False


class LabeledFormatter(logging.Formatter):
    """``<LABEL> <message>``, followed by the traceback when one is attached."""

    def format(self, record: logging.LogRecord) -> str:
        label = LEVEL_LABELS.get(record.levelno, record.levelname)
        line = f"{label} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach the labeled console handler to the package logger.

    Safe to call repeatedly: later calls only lower the level when ``debug``
    is requested. ``stream`` defaults to the current ``sys.stdout``.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO
    if _configured:
        if debug:
            logger.setLevel(level)
            for handler in _console_handlers(logger):
                handler.setLevel(level)
        return logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    setattr(handler, _HANDLER_MARK, True)

    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False  # root handlers would print every line twice
    _configured = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Package logger (configured on first use), or a named child of it."""
    logger = setup_logging()
    return logger.getChild(name) if name else logger


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the console handler and restore propagation. For tests."""
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    for handler in _console_handlers(logger):
        logger.removeHandler(handler)
    logger.propagate = True
    _configured = False
