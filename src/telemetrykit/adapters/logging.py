"""Python logging bridge for LevelLogger.

This adapter forwards records from the standard library logging module to a
LevelLogger, so third-party libraries end up in the same log stream.
"""

import io
import logging
from typing import Any

from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import Level

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def level_for_record(levelno: int) -> Level:
    """Map a stdlib level number onto a LevelLogger severity."""
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class LevelLoggerHandler(logging.Handler):
    """Logging handler that re-emits records through a LevelLogger.

    The record's own ``filename:lineno`` is reported as caller, and
    exception info is attached the same way ``wrap_error`` does.

    Example:
        ```python
        handler = LevelLoggerHandler(default())
        logging.getLogger().addHandler(handler)
        ```
    """

    def __init__(self, logger: LevelLogger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        logger = self._logger.bind(logger=record.name)
        if record.exc_info and record.exc_info[1] is not None:
            logger = logger.wrap_error(record.exc_info[1])
        logger = logger.at(level_for_record(record.levelno))

        pairs: list[tuple[str, Any]] = [
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
        ]
        pairs.append(("msg", record.getMessage()))
        logger.emit(pairs, caller=f"{record.filename}:{record.lineno}")


def redirect_stdlib_logging(
    logger: LevelLogger, level: int = logging.INFO
) -> LevelLoggerHandler:
    """Route the root stdlib logger into ``logger``.

    Returns:
        The installed handler, for later removal.
    """
    handler = LevelLoggerHandler(logger)
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


class LogWriter(io.TextIOBase):
    """Text stream that logs every write as a ``msg`` field.

    Useful with ``contextlib.redirect_stdout`` or libraries that only
    accept a file object.
    """

    def __init__(self, logger: LevelLogger) -> None:
        super().__init__()
        self._logger = logger

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        line = text.rstrip("\n")
        if line:
            self._logger.log(msg=line)
        return len(text)
