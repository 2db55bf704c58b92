"""InfluxDB adapter for metric submission.

Speaks the InfluxDB 1.x HTTP API (``/write`` with line protocol and ``/ping``)
through httpx, and wires a Monitor with its connectivity probe.
"""

import threading

import httpx

from telemetrykit.core.config import parse_backend_config
from telemetrykit.core.encoding.line_protocol import encode_point
from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import BackendConfig, MeasurementPoint
from telemetrykit.core.monitoring import Monitor
from telemetrykit.core.ports import MetricsBackendPort
from telemetrykit.core.probe import DEFAULT_PROBE_INTERVAL, ConnectivityProbe


class InfluxHttpBackend:
    """MetricsBackendPort over the InfluxDB HTTP API.

    httpx.Client is safe to share between threads, so writes are not
    serialized.

    Args:
        config: Parsed backend target.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    concurrency_safe = True

    def __init__(
        self,
        config: BackendConfig,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        auth = (config.username, config.password) if config.username else None
        self._client = httpx.Client(
            base_url=config.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    def write(self, database: str, point: MeasurementPoint) -> None:
        response = self._client.post(
            "/write",
            params={"db": database, "precision": "ns"},
            content=encode_point(point).encode("utf-8"),
        )
        response.raise_for_status()

    def ping(self) -> None:
        self._client.get("/ping").raise_for_status()

    def close(self) -> None:
        self._client.close()


def new_influxdb_monitor(
    config: str,
    logger: LevelLogger,
    backend: MetricsBackendPort | None = None,
    probe_interval: float = DEFAULT_PROBE_INTERVAL,
    stop_event: threading.Event | None = None,
) -> Monitor:
    """Create a Monitor writing to InfluxDB.

    ``config`` has the form ``https://<username>:<password>@<host>/<database>``.
    An unreachable backend is not an error: the returned monitor logs write
    failures and the probe logs failed pings.

    Args:
        config: Connection URL.
        logger: Logger for the monitor and its probe.
        backend: Backend to use instead of an InfluxHttpBackend.
        probe_interval: Seconds between reachability checks.
        stop_event: External cancellation signal for the probe.

    Raises:
        UrlParseError: If ``config`` is not a URL.
        NotAbsoluteUrlError: If ``config`` has no scheme or host.
    """
    target = parse_backend_config(config)
    if backend is None:
        backend = InfluxHttpBackend(target)

    probe_logger = logger.bind(
        scheme=target.scheme,
        username=target.username,
        database=target.database,
        host=target.host,
    )
    probe = ConnectivityProbe(backend, probe_logger, probe_interval, stop_event)
    monitor = Monitor(backend, target.database, logger, probe)

    probe_logger.info().log(
        msg=(
            f"influxdb instrumentation writing to "
            f"{target.scheme}://{target.username}@{target.host}/{target.database}"
        )
    )
    probe.start()
    return monitor
