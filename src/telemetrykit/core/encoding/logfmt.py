"""Line encoders for log records."""

from collections.abc import Callable
from typing import Any

import structlog

from telemetrykit.core.models import LogRecord

RecordEncoder = Callable[[LogRecord], str]

_logfmt = structlog.processors.LogfmtRenderer(bool_as_flag=False)
_console = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)


def _safe_key(key: Any) -> str:
    return "".join("_" if char <= " " else char for char in str(key))


def _single_line(value: Any) -> Any:
    if isinstance(value, str | BaseException):
        return str(value).replace("\r", "\\r").replace("\n", "\\n")
    return value


def encode_logfmt(record: LogRecord) -> str:
    """Encode a record as one line of ``key=value`` pairs.

    Keys appear as ``level``, ``ts``, ``caller`` followed by the record's
    fields in append order. Newlines inside values are escaped, and
    whitespace or control characters in keys are replaced with ``_``.
    """
    event: dict[str, Any] = {}
    for key, value in record.as_event_dict().items():
        event[_safe_key(key)] = _single_line(value)
    return _logfmt(None, record.level.value, event)


def encode_human(record: LogRecord) -> str:
    """Encode a record for a terminal.

    The ``msg`` field becomes the event text; the remaining fields are
    rendered as ``key=value`` after it.
    """
    event = record.as_event_dict()
    timestamp = event.pop("ts")
    event = {
        "timestamp": timestamp,
        "level": event.pop("level"),
        "event": str(event.pop("msg", "")),
        **event,
    }
    return _console(None, record.level.value, event)


def encoder_for(human: bool) -> RecordEncoder:
    """Pick the encoder for machine-readable or human-readable output."""
    return encode_human if human else encode_logfmt
