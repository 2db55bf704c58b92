"""Leveled, context-accumulating structured logger.

A LevelLogger is an immutable value. ``bind`` and the level methods return
derived loggers and leave the receiver untouched, so loggers can be shared
freely between threads::

    log = LevelLogger(writer).bind(component="billing")
    log.info().log(msg="invoice sent", invoice_id=42)
    log.wrap_error(err).log(during="charge")
"""

import os
import sys
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any

from telemetrykit.core.errors import extract, wrap
from telemetrykit.core.models import Level, LogRecord, Pairs
from telemetrykit.core.ports import RecordWriterPort

# Modules whose frames are skipped when resolving the call site
_INTERNAL_MODULES = (
    "telemetrykit.core.logs",
    "telemetrykit.core.instrumentation",
    "telemetrykit.adapters.logging",
    "contextlib",
    "logging",
)


def _is_internal(module: str) -> bool:
    return any(module == name or module.startswith(name + ".") for name in _INTERNAL_MODULES)


def find_caller() -> str:
    """Return ``file.py:line`` of the first frame outside the logging layer."""
    frame = sys._getframe(1)
    while frame is not None:
        if not _is_internal(frame.f_globals.get("__name__", "")):
            return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"
        frame = frame.f_back
    return "???"


@dataclass(frozen=True)
class LevelLogger:
    """Immutable structured logger.

    Attributes:
        writer: Port the materialized records are handed to.
        fields: Accumulated key-value pairs, in append order.
        level: Severity applied by the last level method, if any.
        clock: Source of unix nanosecond timestamps.
    """

    writer: RecordWriterPort
    fields: Pairs = ()
    level: Level | None = None
    clock: Callable[[], int] = time.time_ns

    def bind(self, **fields: Any) -> "LevelLogger":
        """Return a logger whose records also carry ``fields``."""
        return self.bind_pairs(fields.items())

    def bind_pairs(self, pairs: Iterable[tuple[str, Any]]) -> "LevelLogger":
        """Like ``bind`` for keys that are not valid identifiers."""
        return replace(self, fields=self.fields + tuple(pairs))

    def at(self, level: Level) -> "LevelLogger":
        return replace(self, level=level)

    def debug(self) -> "LevelLogger":
        return self.at(Level.DEBUG)

    def info(self) -> "LevelLogger":
        return self.at(Level.INFO)

    def warn(self) -> "LevelLogger":
        return self.at(Level.WARN)

    def error(self) -> "LevelLogger":
        return self.at(Level.ERROR)

    def crit(self) -> "LevelLogger":
        """Critical records share the error tier."""
        return self.at(Level.ERROR)

    def with_error(self, err: BaseException) -> "LevelLogger":
        """Attach an error's context, ``msg`` and stack trace at error level.

        Args:
            err: The error to describe. It is read, never modified.
        """
        context = extract(err)
        pairs = [*context.keyvals, ("msg", context.message)]
        if context.stacktrace:
            pairs.append(("stacktrace", context.stacktrace))
        return self.bind_pairs(pairs).at(Level.ERROR)

    def wrap_error(self, err: BaseException | None) -> "LevelLogger":
        """Like ``with_error``, but returns the receiver unchanged for None."""
        if err is None:
            return self
        return self.with_error(wrap(err))

    def log(self, **fields: Any) -> None:
        """Emit one record with the accumulated fields plus ``fields``."""
        self.emit(fields.items())

    def emit(self, pairs: Iterable[tuple[str, Any]], caller: str | None = None) -> None:
        """Emit one record from explicit pairs.

        Args:
            pairs: Record-specific key-value pairs.
            caller: Call site to report, resolved from the stack when None.
        """
        record = LogRecord(
            timestamp_ns=self.clock(),
            level=self.level or Level.INFO,
            caller=caller or find_caller(),
            fields=self.fields + tuple(pairs),
        )
        self.writer.write(record)

