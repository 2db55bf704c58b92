"""Error types and structured error context extraction."""

import sys
import traceback
from typing import Any

from telemetrykit.core.models import ErrorContext, Pairs


class ConfigurationError(ValueError):
    """Raised when a monitor cannot be built from its configuration."""


class UrlParseError(ConfigurationError):
    """The configuration string is not a URL."""


class NotAbsoluteUrlError(ConfigurationError):
    """The configuration URL has no scheme or host."""


class WrappedError(Exception):
    """An error annotated with key-values and a stack trace.

    The wrapped error is referenced, never modified.

    Attributes:
        cause: The wrapped error.
        message: Optional prefix for the rendered message.
        keyvals: Structured context attached at the wrap site.
        stacktrace: Formatted stack trace.
    """

    def __init__(
        self,
        cause: BaseException,
        message: str = "",
        keyvals: Pairs = (),
        stacktrace: str = "",
    ) -> None:
        super().__init__(message or str(cause))
        self.cause = cause
        self.message = message
        self.keyvals = keyvals
        self.stacktrace = stacktrace
        self.__cause__ = cause

    def __str__(self) -> str:
        if self.message:
            return f"{self.message}: {self.cause}"
        return str(self.cause)


def _format_traceback(err: BaseException) -> str:
    return "".join(traceback.format_exception(type(err), err, err.__traceback__))


def wrap(err: BaseException, message: str = "", **keyvals: Any) -> WrappedError:
    """Wrap ``err`` with a message prefix and structured key-values.

    The stack trace comes from the error's own traceback when it was
    raised, otherwise from the stack at the wrap site.

    Args:
        err: The error to wrap.
        message: Optional message prefix.
        **keyvals: Structured context for the log record.

    Returns:
        A new WrappedError referencing ``err``.
    """
    if isinstance(err, WrappedError) or err.__traceback__ is not None:
        stacktrace = ""
    else:
        stacktrace = "".join(traceback.format_stack(sys._getframe(1)))
    return WrappedError(err, message, tuple(keyvals.items()), stacktrace)


def extract(err: BaseException) -> ErrorContext:
    """Derive the message, key-values and stack trace of an error.

    Key-values are gathered across nested wrappers, outermost first.
    The innermost known stack trace wins.
    """
    keyvals: list[tuple[str, Any]] = []
    stacktrace = ""
    current: BaseException = err
    while isinstance(current, WrappedError):
        keyvals.extend(current.keyvals)
        if current.stacktrace:
            stacktrace = current.stacktrace
        current = current.cause
    if current.__traceback__ is not None:
        stacktrace = _format_traceback(current)
    return ErrorContext(message=str(err), keyvals=tuple(keyvals), stacktrace=stacktrace)
