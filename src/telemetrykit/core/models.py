"""Core domain models for log records and metric points."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Ordered (key, value) pairs as they are appended to a logger.
Pairs = tuple[tuple[str, Any], ...]


class Level(str, Enum):
    """Severity tiers, rendered lowercase in log lines."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]


_LEVEL_RANK = {Level.DEBUG: 10, Level.INFO: 20, Level.WARN: 30, Level.ERROR: 40}


def format_rfc3339_nano(timestamp_ns: int) -> str:
    """Format a unix timestamp in nanoseconds as RFC3339 UTC with nanoseconds.

    Args:
        timestamp_ns: Nanoseconds since the unix epoch.

    Returns:
        String such as ``2024-01-02T03:04:05.123456789Z``.
    """
    seconds, nanos = divmod(timestamp_ns, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{nanos:09d}Z"


@dataclass(frozen=True)
class LogRecord:
    """A materialized log line.

    Attributes:
        timestamp_ns: Wall-clock time of emission, unix nanoseconds.
        level: Severity the record was emitted at.
        caller: ``file.py:line`` of the logging call site.
        fields: Ordered key-value pairs, parent context first.
    """

    timestamp_ns: int
    level: Level
    caller: str
    fields: Pairs = ()

    @property
    def timestamp(self) -> str:
        return format_rfc3339_nano(self.timestamp_ns)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the last value recorded under ``key``."""
        for name, value in reversed(self.fields):
            if name == key:
                return value
        return default

    def keys(self) -> list[str]:
        return [name for name, _ in self.fields]

    def as_event_dict(self) -> dict[str, Any]:
        """Flatten into the key order used by the encoders.

        Repeated field keys collapse onto their first position with the
        last value.
        """
        event: dict[str, Any] = {
            "level": self.level.value,
            "ts": self.timestamp,
            "caller": self.caller,
        }
        for name, value in self.fields:
            event[name] = value
        return event


@dataclass(frozen=True)
class ErrorContext:
    """Structured view of an error, derived once when it is logged.

    Attributes:
        message: Rendered error message.
        keyvals: Structured context attached where the error was wrapped.
        stacktrace: Formatted stack trace, empty when none is known.
    """

    message: str
    keyvals: Pairs = ()
    stacktrace: str = ""


@dataclass(frozen=True)
class MeasurementPoint:
    """A single metric submission.

    Attributes:
        measurement: Measurement name (e.g. ``http_requests``).
        value: The numeric value, also present as ``fields["value"]``.
        tags: Indexed string dimensions.
        fields: Scalar payload values.
        timestamp: Time the measurement refers to.
    """

    measurement: str
    value: Any
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class BackendConfig:
    """Parsed metrics backend target.

    Attributes:
        scheme: URL scheme (``http`` or ``https``).
        host: ``host[:port]`` of the backend.
        database: Database the points are written to.
        username: Username from the URL, empty when absent.
        password: Password from the URL, empty when absent.
    """

    scheme: str
    host: str
    database: str
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one reachability check."""

    reachable: bool
    checked_at: float
    error: BaseException | None = None
