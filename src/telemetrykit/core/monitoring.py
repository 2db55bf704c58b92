"""Fire-and-forget metric submission.

A Monitor never reports backend failures to its callers. Failed writes are
logged at error level and dropped; there is no retry.
"""

import queue
import threading
from datetime import UTC, datetime
from typing import Any

from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import MeasurementPoint
from telemetrykit.core.ports import MetricsBackendPort
from telemetrykit.core.probe import ConnectivityProbe

_STOP = object()


class Monitor:
    """Submits measurement points to a backend database.

    Backends that are not ``concurrency_safe`` get a single writer thread
    fed by a queue; otherwise each submission writes on the caller's thread.

    Args:
        backend: Backend the points are written to.
        database: Target database.
        logger: Logger for failed writes.
        probe: Connectivity probe owned by this monitor, if any.
    """

    def __init__(
        self,
        backend: MetricsBackendPort,
        database: str,
        logger: LevelLogger,
        probe: ConnectivityProbe | None = None,
    ) -> None:
        self._backend = backend
        self._database = database
        self._logger = logger
        self._probe = probe
        self._queue: queue.Queue[Any] | None = None
        self._writer: threading.Thread | None = None
        self._closed = False
        self._lock = threading.Lock()
        if not getattr(backend, "concurrency_safe", False):
            self._queue = queue.Queue()
            self._writer = threading.Thread(
                target=self._drain,
                args=(self._queue,),
                name="telemetrykit-writer",
                daemon=True,
            )
            self._writer.start()

    @property
    def database(self) -> str:
        return self._database

    @property
    def probe(self) -> ConnectivityProbe | None:
        return self._probe

    def insert_record(
        self,
        measurement: str,
        value: Any,
        tags: dict[str, str] | None,
        fields: dict[str, Any] | None,
        at: datetime,
    ) -> None:
        """Submit one point. ``fields["value"]`` is always set to ``value``.

        The caller's ``tags`` and ``fields`` dicts are copied, not modified.
        Points submitted after ``close`` are dropped and logged at warn.
        """
        point = MeasurementPoint(
            measurement=measurement,
            value=value,
            tags=dict(tags or {}),
            fields={**(fields or {}), "value": value},
            timestamp=at,
        )
        with self._lock:
            closed = self._closed
            if not closed and self._queue is not None:
                self._queue.put(point)
                return
        if closed:
            self._logger.warn().log(
                database=self._database,
                measurement=measurement,
                value=value,
                msg=f"Monitor closed, dropping record for {measurement}",
            )
            return
        self._write(point)

    def count(
        self,
        measurement: str,
        value: float,
        tags: dict[str, str] | None = None,
        fields: dict[str, Any] | None = None,
    ) -> None:
        self.insert_record(measurement, value, tags, fields, datetime.now(UTC))

    def count_error(self, measurement: str, value: float, err: BaseException) -> None:
        """Count ``value`` with the error's message stored in an ``error`` tag."""
        self.count(measurement, value, {"error": str(err)})

    def count_simple(self, measurement: str, value: float) -> None:
        """Count ``value`` without tags."""
        self.count(measurement, value)

    def _write(self, point: MeasurementPoint) -> None:
        try:
            self._backend.write(self._database, point)
        except Exception as err:
            self._logger.error().log(
                err=err,
                database=self._database,
                measurement=point.measurement,
                value=point.value,
                tags=point.tags,
                during=f"{type(self._backend).__name__}.write",
                msg=f"Error inserting record into {point.measurement}: {err}",
            )

    def _drain(self, points: queue.Queue[Any]) -> None:
        while True:
            point = points.get()
            if point is _STOP:
                return
            self._write(point)

    def close(self) -> None:
        """Stop the probe, flush queued points and close the backend."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._queue is not None:
                self._queue.put(_STOP)
        if self._probe is not None:
            self._probe.stop()
        if self._writer is not None:
            self._writer.join()
        self._backend.close()

    def __enter__(self) -> "Monitor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
