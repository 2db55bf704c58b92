"""Notifier test doubles.

``BufferNotifier`` collects notifications for later assertions;
``TestNotifier`` fails the running test on any notification.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class Notifier(Protocol):
    """Receives unexpected errors, optionally with the request being served."""

    def notify(self, err: Any, request: httpx.Request | None = None) -> None: ...


@dataclass(frozen=True)
class Notice:
    """Arguments of one ``notify`` call."""

    error: Any
    request: httpx.Request | None = None


@dataclass
class BufferNotifier:
    """Stores every notice it receives."""

    notices: list[Notice] = field(default_factory=list)

    def notify(self, err: Any, request: httpx.Request | None = None) -> None:
        self.notices.append(Notice(error=err, request=request))


def _pytest_fail(reason: str) -> None:
    import pytest

    pytest.fail(reason)


@dataclass
class TestNotifier:
    """Fails the current test when notified.

    Attributes:
        fail: Called with the rendered error, ``pytest.fail`` by default.
    """

    __test__ = False

    fail: Callable[[str], None] = _pytest_fail

    def notify(self, err: Any, request: httpx.Request | None = None) -> None:
        self.fail(f"unexpected error notified: {err}")
