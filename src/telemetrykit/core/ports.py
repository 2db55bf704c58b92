"""Port interfaces for log writers and metrics backends.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from telemetrykit.core.models import LogRecord, MeasurementPoint


@runtime_checkable
class RecordWriterPort(Protocol):
    """Port for emitting materialized log records.

    Examples: StreamRecordWriter, InMemoryRecordWriter, NopRecordWriter.
    """

    def write(self, record: LogRecord) -> None:
        """Emit one record."""
        ...


@runtime_checkable
class MetricsBackendPort(Protocol):
    """Port for a remote time-series backend.

    Adapters raise on failure; callers decide how failures are reported.
    ``concurrency_safe`` tells the monitor whether ``write`` may be called
    from several threads at once.
    """

    concurrency_safe: bool

    def write(self, database: str, point: MeasurementPoint) -> None:
        """Write a single point into ``database``."""
        ...

    def ping(self) -> None:
        """Round-trip to the backend, raising when it is unreachable."""
        ...

    def close(self) -> None:
        """Release connections held by the backend."""
        ...


@runtime_checkable
class MonitorPort(Protocol):
    """Port for fire-and-forget metric submission."""

    def insert_record(
        self,
        measurement: str,
        value: Any,
        tags: dict[str, str] | None,
        fields: dict[str, Any] | None,
        at: datetime,
    ) -> None: ...

    def count(
        self,
        measurement: str,
        value: float,
        tags: dict[str, str] | None = None,
        fields: dict[str, Any] | None = None,
    ) -> None: ...

    def count_error(self, measurement: str, value: float, err: BaseException) -> None: ...

    def count_simple(self, measurement: str, value: float) -> None: ...
