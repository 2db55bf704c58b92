"""Tests for the notifier test doubles."""

import httpx
import pytest

from telemetrykit.testing import BufferNotifier, Notice, Notifier, TestNotifier


@pytest.mark.core
class TestBufferNotifier:
    """Tests for BufferNotifier."""

    def test_is_a_notifier(self) -> None:
        assert isinstance(BufferNotifier(), Notifier)

    def test_collects_notices_in_order(self) -> None:
        notifier = BufferNotifier()
        request = httpx.Request("GET", "http://example.test/orders")
        first = ValueError("first")

        notifier.notify(first)
        notifier.notify("second", request=request)

        assert notifier.notices == [
            Notice(error=first),
            Notice(error="second", request=request),
        ]


@pytest.mark.core
class TestTestNotifier:
    """Tests for TestNotifier."""

    def test_is_a_notifier(self) -> None:
        assert isinstance(TestNotifier(), Notifier)

    def test_notify_fails_the_test(self) -> None:
        reasons: list[str] = []
        notifier = TestNotifier(fail=reasons.append)

        notifier.notify(RuntimeError("boom"))

        assert reasons == ["unexpected error notified: boom"]

    def test_default_uses_pytest_fail(self) -> None:
        with pytest.raises(pytest.fail.Exception, match="unexpected error notified: boom"):
            TestNotifier().notify(RuntimeError("boom"))
