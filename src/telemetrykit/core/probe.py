"""Background reachability checks against a metrics backend."""

import threading
import time

from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import ProbeResult
from telemetrykit.core.ports import MetricsBackendPort

DEFAULT_PROBE_INTERVAL = 5 * 60.0


class ConnectivityProbe:
    """Pings a backend on a fixed interval until stopped.

    The first check runs as soon as the probe starts. Failures are logged
    at warn level and never end the loop; successful checks log nothing.

    Args:
        backend: Backend to ping.
        logger: Logger for failed checks.
        interval: Seconds between checks.
        stop_event: Cancellation signal, a fresh event when None.
    """

    def __init__(
        self,
        backend: MetricsBackendPort,
        logger: LevelLogger,
        interval: float = DEFAULT_PROBE_INTERVAL,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._backend = backend
        self._logger = logger
        self._interval = interval
        self._stop = stop_event or threading.Event()
        self._thread: threading.Thread | None = None
        self._last_result: ProbeResult | None = None
        self._checks = 0

    @property
    def last_result(self) -> ProbeResult | None:
        return self._last_result

    @property
    def checks(self) -> int:
        return self._checks

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def check(self) -> ProbeResult:
        """Run one reachability check and record its outcome."""
        try:
            self._backend.ping()
        except Exception as err:
            result = ProbeResult(reachable=False, checked_at=time.time(), error=err)
            self._logger.warn().log(
                err=err,
                during=f"{type(self._backend).__name__}.ping",
                msg=f"couldn't ping influxdb: {err}",
            )
        else:
            result = ProbeResult(reachable=True, checked_at=time.time())
        self._last_result = result
        self._checks += 1
        return result

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check()
            if self._stop.wait(self._interval):
                break

    def start(self) -> None:
        """Start the background thread. Starting twice is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, name="telemetrykit-probe", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to end and wait for the thread to exit."""
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
