"""Configuration values for loggers and metrics backends.

Nothing in the core reads the environment on its own; ``LoggerConfig.from_env``
is meant to be called once at the process boundary.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

import httpx

from telemetrykit.core.errors import NotAbsoluteUrlError, UrlParseError
from telemetrykit.core.models import BackendConfig

HUMAN_LOG_ENV = "TELEMETRYKIT_LOG_HUMAN"

_FALSEY = frozenset({"", "false", "0"})


def is_enabled(value: str | None) -> bool:
    """Interpret an environment toggle.

    Empty, ``false`` and ``0`` (any case) are off; any other value is on.
    """
    if value is None:
        return False
    return value.strip().lower() not in _FALSEY


@dataclass(frozen=True)
class LoggerConfig:
    """Logger construction options.

    Attributes:
        human: Render human-readable lines instead of logfmt.
        stream: Output stream, stdout when None.
    """

    human: bool = False
    stream: TextIO | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LoggerConfig":
        env = os.environ if environ is None else environ
        return cls(human=is_enabled(env.get(HUMAN_LOG_ENV)))


def parse_backend_config(config: str) -> BackendConfig:
    """Parse ``scheme://[user[:password]@]host[:port]/database``.

    Args:
        config: Connection URL of the metrics backend.

    Returns:
        BackendConfig with the database taken from the URL path.

    Raises:
        UrlParseError: If ``config`` is not a URL at all.
        NotAbsoluteUrlError: If ``config`` has no scheme or host.
    """
    try:
        url = httpx.URL(config)
    except httpx.InvalidURL as err:
        raise UrlParseError(f"couldn't parse influxdb url {config}") from err
    if not url.scheme and not url.path.startswith("/"):
        raise UrlParseError(f"couldn't parse influxdb url {config}")
    if not url.scheme or not url.host:
        raise NotAbsoluteUrlError(f"influxdb monitoring url {config} not absolute url")
    return BackendConfig(
        scheme=url.scheme,
        host=url.netloc.decode("ascii"),
        database=url.path.lstrip("/"),
        username=url.username,
        password=url.password,
    )
