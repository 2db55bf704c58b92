"""Step definitions for monitoring BDD scenarios."""

from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import timedelta

import pytest
from pytest_bdd import given, parsers, then, when

from telemetrykit.adapters.in_memory import InMemoryMetricsBackend, InMemoryRecordWriter
from telemetrykit.adapters.influxdb import new_influxdb_monitor
from telemetrykit.core.instrumentation import InstrumentationAdapter
from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import Level
from telemetrykit.core.monitoring import Monitor


@dataclass
class MonitoringScenarioContext:
    """Shared state between steps in a monitoring scenario."""

    writer: InMemoryRecordWriter = field(default_factory=InMemoryRecordWriter)
    backend: InMemoryMetricsBackend = field(default_factory=InMemoryMetricsBackend)
    monitor: Monitor | None = None
    adapter: InstrumentationAdapter | None = None

    @property
    def logger(self) -> LevelLogger:
        return LevelLogger(writer=self.writer)


@pytest.fixture
def ctx() -> Generator[MonitoringScenarioContext, None, None]:
    context = MonitoringScenarioContext()
    yield context
    if context.monitor is not None:
        context.monitor.close()


# === Given ===


@given(parsers.parse('a monitor for "{url}"'))
def given_monitor(ctx: MonitoringScenarioContext, url: str) -> None:
    ctx.monitor = new_influxdb_monitor(
        url, ctx.logger, backend=ctx.backend, probe_interval=0.01
    )
    ctx.backend.wait_for_pings(1)
    ctx.writer.clear()


@given(parsers.parse('the backend rejects writes with "{message}"'))
def given_backend_rejects_writes(ctx: MonitoringScenarioContext, message: str) -> None:
    ctx.backend.write_error = ConnectionError(message)


@given(parsers.parse('the backend refuses pings with "{message}"'))
def given_backend_refuses_pings(ctx: MonitoringScenarioContext, message: str) -> None:
    ctx.backend.ping_error = ConnectionError(message)


@given("an instrumentation adapter")
def given_adapter(ctx: MonitoringScenarioContext) -> None:
    ctx.adapter = InstrumentationAdapter(ctx.logger)


# === When ===


@when(parsers.parse('I count {value:d} for "{measurement}"'))
def when_count(ctx: MonitoringScenarioContext, value: int, measurement: str) -> None:
    assert ctx.monitor is not None
    ctx.monitor.count_simple(measurement, value)


@when(parsers.parse('I count an error "{message}" for "{measurement}"'))
def when_count_error(ctx: MonitoringScenarioContext, message: str, measurement: str) -> None:
    assert ctx.monitor is not None
    ctx.monitor.count_error(measurement, 1, RuntimeError(message))


@when(parsers.parse("the probe has pinged {count:d} times"))
def when_probe_pinged(ctx: MonitoringScenarioContext, count: int) -> None:
    baseline = ctx.backend.ping_count
    # one extra ping guarantees the first {count} checks finished logging
    assert ctx.backend.wait_for_pings(baseline + count + 1)


@when(parsers.parse("a query takes {millis:d} milliseconds"))
def when_query_takes(ctx: MonitoringScenarioContext, millis: int) -> None:
    assert ctx.adapter is not None
    ctx.adapter.print("sql", "repo.py:1", timedelta(milliseconds=millis), "SELECT 1", [])


@when(parsers.parse('instrumented code reports the error "{message}"'))
def when_reports_error(ctx: MonitoringScenarioContext, message: str) -> None:
    assert ctx.adapter is not None
    ctx.adapter.print("log", "repo.py:1", RuntimeError(message))


# === Then ===


@then(parsers.parse("the backend holds {count:d} point"))
@then(parsers.parse("the backend holds {count:d} points"))
def then_backend_holds(ctx: MonitoringScenarioContext, count: int) -> None:
    assert len(ctx.backend.points) == count


@then(parsers.parse('the last point has measurement "{measurement}" and field value {value:d}'))
def then_last_point(ctx: MonitoringScenarioContext, measurement: str, value: int) -> None:
    point = ctx.backend.points[-1]
    assert point.measurement == measurement
    assert point.fields["value"] == value


@then(parsers.parse('the last point has tag "{key}" set to "{value}"'))
def then_last_point_tag(ctx: MonitoringScenarioContext, key: str, value: str) -> None:
    assert ctx.backend.points[-1].tags[key] == value


@then(parsers.parse("{count:d} error records were logged"))
def then_error_records(ctx: MonitoringScenarioContext, count: int) -> None:
    assert len(ctx.writer.at(Level.ERROR)) == count


@then(parsers.parse('every error record has "{key}" set to "{value}"'))
def then_every_error_record(ctx: MonitoringScenarioContext, key: str, value: str) -> None:
    assert all(record.get(key) == value for record in ctx.writer.at(Level.ERROR))


@then(parsers.parse('at least {count:d} warn records mention "{text}"'))
def then_warn_records(ctx: MonitoringScenarioContext, count: int, text: str) -> None:
    matching = [r for r in ctx.writer.at(Level.WARN) if text in str(r.get("msg"))]
    assert len(matching) >= count


@then(parsers.parse('one record is logged at "{level}"'))
def then_one_record_at(ctx: MonitoringScenarioContext, level: str) -> None:
    records = ctx.writer.records
    assert len(records) == 1
    assert records[0].level is Level(level)


@then(parsers.parse('the record message is "{message}"'))
def then_record_message(ctx: MonitoringScenarioContext, message: str) -> None:
    assert ctx.writer.records[0].get("msg") == message
