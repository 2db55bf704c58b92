"""Shared test fixtures for all test modules."""

import itertools

import pytest

from telemetrykit.adapters.in_memory import InMemoryMetricsBackend, InMemoryRecordWriter
from telemetrykit.core.logs import LevelLogger


@pytest.fixture
def writer() -> InMemoryRecordWriter:
    """Empty in-memory record writer."""
    return InMemoryRecordWriter()


@pytest.fixture
def logger(writer: InMemoryRecordWriter) -> LevelLogger:
    """Logger writing into the ``writer`` fixture with a deterministic clock."""
    ticks = itertools.count(1_700_000_000_000_000_000, 1_000)
    return LevelLogger(writer=writer, clock=lambda: next(ticks))


@pytest.fixture
def backend() -> InMemoryMetricsBackend:
    """Reachable in-memory metrics backend."""
    return InMemoryMetricsBackend()


@pytest.fixture
def failing_backend() -> InMemoryMetricsBackend:
    """Backend whose writes and pings always fail."""
    return InMemoryMetricsBackend(
        write_error=ConnectionError("connection refused"),
        ping_error=ConnectionError("connection refused"),
    )
