"""In-memory adapters for log records and metric points."""

import threading

from telemetrykit.core.models import Level, LogRecord, MeasurementPoint


class InMemoryRecordWriter:
    """In-memory implementation of RecordWriterPort.

    Stores records in a list. Suitable for testing.
    """

    def __init__(self) -> None:
        self._records: list[LogRecord] = []
        self._lock = threading.Lock()

    def write(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[LogRecord]:
        with self._lock:
            return list(self._records)

    def at(self, level: Level) -> list[LogRecord]:
        """Records emitted at ``level``."""
        return [record for record in self.records if record.level is level]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class InMemoryMetricsBackend:
    """In-memory implementation of MetricsBackendPort.

    Records written points and ping attempts. Set ``write_error`` or
    ``ping_error`` to make the corresponding call raise.
    """

    concurrency_safe = True

    def __init__(
        self,
        write_error: BaseException | None = None,
        ping_error: BaseException | None = None,
    ) -> None:
        self.write_error = write_error
        self.ping_error = ping_error
        self.closed = False
        self._points: list[tuple[str, MeasurementPoint]] = []
        self._pings = 0
        self._lock = threading.Lock()
        self._pinged = threading.Condition(self._lock)

    def write(self, database: str, point: MeasurementPoint) -> None:
        if self.write_error is not None:
            raise self.write_error
        with self._lock:
            self._points.append((database, point))

    def ping(self) -> None:
        with self._lock:
            self._pings += 1
            self._pinged.notify_all()
        if self.ping_error is not None:
            raise self.ping_error

    def close(self) -> None:
        self.closed = True

    @property
    def points(self) -> list[MeasurementPoint]:
        with self._lock:
            return [point for _, point in self._points]

    @property
    def writes(self) -> list[tuple[str, MeasurementPoint]]:
        with self._lock:
            return list(self._points)

    @property
    def ping_count(self) -> int:
        with self._lock:
            return self._pings

    def wait_for_pings(self, count: int, timeout: float = 5.0) -> bool:
        """Block until at least ``count`` pings were attempted."""
        with self._pinged:
            return self._pinged.wait_for(lambda: self._pings >= count, timeout)
