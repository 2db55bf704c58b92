"""Stream record writers and the loggers built on them."""

import sys
import threading
from typing import TextIO

from telemetrykit.core.config import LoggerConfig
from telemetrykit.core.encoding.logfmt import RecordEncoder, encode_logfmt, encoder_for
from telemetrykit.core.logs import LevelLogger
from telemetrykit.core.models import LogRecord


class StreamRecordWriter:
    """Writes one encoded line per record to a text stream.

    Writes are serialized so lines from concurrent loggers never interleave.

    Args:
        stream: Destination text stream.
        encoder: Record encoder, logfmt by default.
    """

    def __init__(self, stream: TextIO, encoder: RecordEncoder = encode_logfmt) -> None:
        self._stream = stream
        self._encoder = encoder
        self._lock = threading.Lock()

    def write(self, record: LogRecord) -> None:
        line = self._encoder(record)
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()


class NopRecordWriter:
    """Discards every record."""

    def write(self, record: LogRecord) -> None:
        pass


def default(config: LoggerConfig | None = None) -> LevelLogger:
    """Create a logger writing logfmt (or human-readable) lines to a stream.

    Args:
        config: Output options; logfmt on stdout when None.
    """
    config = config or LoggerConfig()
    stream = config.stream or sys.stdout
    return LevelLogger(writer=StreamRecordWriter(stream, encoder_for(config.human)))


def nop_logger() -> LevelLogger:
    """Create a logger that accepts everything and writes nothing."""
    return LevelLogger(writer=NopRecordWriter())
