"""InfluxDB line protocol encoder for measurement points."""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from telemetrykit.core.models import MeasurementPoint

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _escape_measurement(name: str) -> str:
    return name.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _escape_key(key: str) -> str:
    return (
        key.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace("=", "\\=")
        .replace(" ", "\\ ")
    )


def _encode_field_value(value: Any) -> str:
    # bool before int, bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def to_unix_nanos(moment: datetime) -> int:
    """Convert a datetime to unix nanoseconds.

    Naive datetimes are interpreted as local time.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - _EPOCH) // timedelta(microseconds=1) * 1000


def encode_point(point: MeasurementPoint) -> str:
    """Encode a single point as one line of line protocol.

    Tags are sorted by key and empty tag values are dropped. Fields whose
    value is None are dropped.

    Args:
        point: The measurement point to encode.

    Returns:
        ``measurement[,tag=value...] field=value[,...] timestamp``
    """
    head = _escape_measurement(point.measurement)
    for key in sorted(point.tags):
        value = point.tags[key]
        if value == "":
            continue
        head += f",{_escape_key(key)}={_escape_key(str(value))}"
    fields = ",".join(
        f"{_escape_key(key)}={_encode_field_value(value)}"
        for key, value in point.fields.items()
        if value is not None
    )
    return f"{head} {fields} {to_unix_nanos(point.timestamp)}"


def encode_points(points: Iterable[MeasurementPoint]) -> str:
    """Encode points to newline-delimited line protocol.

    Returns:
        One line per point, empty string if no points.
    """
    lines = [encode_point(point) for point in points]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
