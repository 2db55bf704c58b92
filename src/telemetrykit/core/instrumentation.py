"""Translate call instrumentation events into leveled log records.

Query events escalate by duration: above 100ms they are logged at warn,
above 50ms at info, otherwise at debug.
"""

import time
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import Level

SLOW_CALL_THRESHOLD = timedelta(milliseconds=100)
NOTABLE_CALL_THRESHOLD = timedelta(milliseconds=50)


def level_for_duration(duration: timedelta) -> Level:
    """Pick the severity for a call that took ``duration``.

    timedelta resolves microseconds, so a call of 50.0004ms compares equal
    to the 50ms threshold and is logged at debug.
    """
    if duration > SLOW_CALL_THRESHOLD:
        return Level.WARN
    if duration > NOTABLE_CALL_THRESHOLD:
        return Level.INFO
    return Level.DEBUG


@dataclass(frozen=True)
class ErrorValue:
    error: BaseException

    def render(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class TextValue:
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class NumberValue:
    number: int | float

    def render(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class DurationValue:
    duration: timedelta

    def render(self) -> str:
        return f"{self.duration.total_seconds() * 1000:g}ms"


@dataclass(frozen=True)
class ObjectValue:
    obj: Any

    def render(self) -> str:
        return str(self.obj)


Value = ErrorValue | TextValue | NumberValue | DurationValue | ObjectValue


def as_value(obj: Any) -> Value:
    """Classify an arbitrary object into a tagged value."""
    if isinstance(obj, ErrorValue | TextValue | NumberValue | DurationValue | ObjectValue):
        return obj
    if isinstance(obj, BaseException):
        return ErrorValue(obj)
    if isinstance(obj, str):
        return TextValue(obj)
    if isinstance(obj, int | float) and not isinstance(obj, bool):
        return NumberValue(obj)
    if isinstance(obj, timedelta):
        return DurationValue(obj)
    return ObjectValue(obj)


def render_values(values: Iterable[Value]) -> str:
    """Render values as ``[a b c]``."""
    return "[" + " ".join(value.render() for value in values) + "]"


@dataclass(frozen=True)
class QueryEvent:
    """A completed call, such as a SQL statement, with its duration."""

    source: str
    duration: timedelta
    statement: str
    values: tuple[Value, ...] = ()
    category: str = "sql"


@dataclass(frozen=True)
class MessageEvent:
    """A log-style payload emitted by instrumented code."""

    category: str
    source: str
    values: tuple[Value, ...] = field(default_factory=tuple)


Event = QueryEvent | MessageEvent


class InstrumentationAdapter:
    """Logs instrumentation events through a LevelLogger.

    Args:
        logger: Logger the records are emitted through.
    """

    def __init__(self, logger: LevelLogger) -> None:
        self._logger = logger

    def handle(self, event: Event) -> None:
        """Emit the record(s) for one event."""
        logger = self._logger.bind(type=event.category, source=event.source)
        if isinstance(event, QueryEvent):
            self._log_query(logger, event)
        elif isinstance(event, MessageEvent):
            self._log_message(logger, event.values)
        else:
            raise TypeError(f"unsupported instrumentation event: {event!r}")

    def _log_query(self, logger: LevelLogger, event: QueryEvent) -> None:
        pairs: list[tuple[str, Any]] = [
            ("query_us", event.duration // timedelta(microseconds=1)),
            ("query", event.statement),
        ]
        if event.values:
            pairs.append(("values", render_values(event.values)))
        logger.at(level_for_duration(event.duration)).emit(pairs)

    def _log_message(self, logger: LevelLogger, values: tuple[Value, ...]) -> None:
        if len(values) == 1:
            (value,) = values
            if isinstance(value, ErrorValue):
                logger.error().log(msg=value.render())
            else:
                logger.info().log(msg=value.render())
            return
        logger.info().log(msg=render_values(values))

    def print(self, *values: Any) -> None:
        """Accept the positional shape used by ORM loggers.

        ``("sql", source, duration, statement, bound_values)`` becomes a
        QueryEvent, ``(category, source, *payload)`` a MessageEvent, and
        anything shorter is logged at info as a rendered dump.
        """
        if len(values) < 2:
            self._logger.info().log(msg=render_values(as_value(v) for v in values))
            return
        category, source, *rest = values
        if (
            category == "sql"
            and len(rest) >= 3
            and isinstance(rest[0], timedelta)
            and isinstance(rest[1], str)
        ):
            duration, statement, bound = rest[0], rest[1], rest[2] or ()
            self.handle(
                QueryEvent(
                    source=str(source),
                    duration=duration,
                    statement=statement,
                    values=tuple(as_value(v) for v in bound),
                )
            )
            return
        self.handle(
            MessageEvent(
                category=str(category),
                source=str(source),
                values=tuple(as_value(v) for v in rest),
            )
        )

    @contextmanager
    def timed(
        self, statement: str, *values: Any, source: str = ""
    ) -> Generator[None, None, None]:
        """Measure the enclosed block and log it as a QueryEvent on exit."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = timedelta(seconds=time.perf_counter() - start)
            self.handle(
                QueryEvent(
                    source=source,
                    duration=elapsed,
                    statement=statement,
                    values=tuple(as_value(v) for v in values),
                )
            )
