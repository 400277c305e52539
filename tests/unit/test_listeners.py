"""Tests for the self-releasing listeners."""

from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest

from handoff.lib.errors import InvalidArgument
from handoff.lib.listener import CleanupListener
from handoff.lib.listeners import CallLimitListener, ConditionListener, TimedListener


def test_listeners_are_cleanup_capable():
    assert isinstance(CallLimitListener(print), CleanupListener)
    assert isinstance(TimedListener(print, ttl=1, timer_factory=MagicMock()), CleanupListener)
    assert isinstance(ConditionListener(print, bool), CleanupListener)


def test_non_callable_callback_raises():
    with pytest.raises(InvalidArgument):
        CallLimitListener("nope")


class TestCallLimitListener:
    """Tests for CallLimitListener."""

    def test_default_releases_after_first_call(self, notifier, make_recorder):
        callback = make_recorder()
        listener = CallLimitListener(callback)
        release = notifier.register("x", listener)

        notifier.notify("x", 1)
        notifier.notify("x", 2)

        assert callback.args == [(1,)]
        assert release.released is True
        assert listener.released is True
        assert "x" not in notifier

    def test_releases_after_max_calls(self, notifier, make_recorder):
        callback = make_recorder()
        notifier.register("x", CallLimitListener(callback, max_calls=3))

        for i in range(5):
            notifier.notify("x", i)

        assert callback.args == [(0,), (1,), (2,)]

    def test_returns_callback_result(self):
        listener = CallLimitListener(lambda v: v * 2, max_calls=2)
        assert listener(21) == 42

    def test_releases_even_if_callback_raises(self, notifier, reported):
        def failing():
            raise ValueError("boom")

        listener = CallLimitListener(failing)
        notifier.register("x", listener)
        notifier.notify("x")

        assert len(reported) == 1
        assert listener.released is True

    def test_registered_on_two_events_releases_both(self, notifier, make_recorder):
        """Reaching the limit through one event drops every registration it holds."""
        callback = make_recorder()
        listener = CallLimitListener(callback, max_calls=1)
        on_x = notifier.register("x", listener)
        on_y = notifier.register("y", listener)

        notifier.notify("x", 1)
        notifier.notify("y", 2)

        assert callback.args == [(1,)]
        assert on_x.released is True
        assert on_y.released is True
        assert listener.released is True
        assert notifier.events() == []

    def test_calls_counted_across_events(self, notifier, make_recorder):
        callback = make_recorder()
        listener = CallLimitListener(callback, max_calls=2)
        notifier.register("x", listener)
        notifier.register("y", listener)

        notifier.notify("x", 1)
        assert notifier.events() == ["x", "y"]
        notifier.notify("y", 2)

        assert callback.args == [(1,), (2,)]
        assert notifier.events() == []

    def test_ignores_calls_past_limit(self, make_recorder):
        """A dispatch snapshot taken before the release may still call it."""
        callback = make_recorder()
        listener = CallLimitListener(callback)
        listener("a")
        listener("b")
        assert callback.args == [("a",)]

    def test_unregistered_listener_release_is_noop(self):
        listener = CallLimitListener(print)
        listener.release()
        assert listener.released is False

    @pytest.mark.parametrize("max_calls", [0, -1])
    def test_invalid_max_calls(self, max_calls):
        with pytest.raises(InvalidArgument):
            CallLimitListener(print, max_calls=max_calls)


class TestTimedListener:
    """Tests for TimedListener."""

    def test_starts_daemon_timer_on_register(self, notifier):
        timer_factory = MagicMock()
        listener = TimedListener(print, ttl=5, timer_factory=timer_factory)
        notifier.register("x", listener)

        timer_factory.assert_called_once()
        assert timer_factory.call_args[0][0] == 5
        timer = timer_factory.return_value
        assert timer.daemon is True
        timer.start.assert_called_once()

    def test_timer_expiry_releases(self, notifier, make_recorder):
        timer_factory = MagicMock()
        callback = make_recorder()
        listener = TimedListener(callback, ttl=5, timer_factory=timer_factory)
        notifier.register("x", listener)

        notifier.notify("x", "before")
        expire = timer_factory.call_args[0][1]
        expire()
        notifier.notify("x", "after")

        assert callback.args == [("before",)]
        assert "x" not in notifier

    def test_each_registration_expires_on_its_own_timer(self, notifier):
        timer_factory = MagicMock()
        listener = TimedListener(print, ttl=5, timer_factory=timer_factory)
        on_x = notifier.register("x", listener)
        on_y = notifier.register("y", listener)

        assert timer_factory.call_count == 2
        expire_y = timer_factory.call_args_list[1][0][1]
        expire_y()

        assert on_y.released is True
        assert on_x.released is False
        assert notifier.events() == ["x"]
        assert listener.released is False

    def test_cancel_releases_every_registration(self, notifier):
        timer_factory = MagicMock()
        listener = TimedListener(print, ttl=5, timer_factory=timer_factory)
        notifier.register("x", listener)
        notifier.register("y", listener)

        listener.cancel()

        assert timer_factory.return_value.cancel.call_count == 2
        assert notifier.events() == []

    def test_cancel_stops_timer_and_releases(self, notifier):
        timer_factory = MagicMock()
        listener = TimedListener(print, ttl=5, timer_factory=timer_factory)
        notifier.register("x", listener)

        listener.cancel()

        timer_factory.return_value.cancel.assert_called_once()
        assert listener.released is True
        assert "x" not in notifier

    def test_real_timer_expires(self, notifier, make_recorder):
        callback = make_recorder()
        listener = TimedListener(callback, ttl=0.01)
        release = notifier.register("x", listener)

        deadline = time.monotonic() + 5
        while not release.released and time.monotonic() < deadline:
            time.sleep(0.01)

        assert release.released is True
        notifier.notify("x", 1)
        assert callback.calls == []

    @pytest.mark.parametrize("ttl", [0, -2.5])
    def test_invalid_ttl(self, ttl):
        with pytest.raises(InvalidArgument):
            TimedListener(print, ttl=ttl)


class TestConditionListener:
    """Tests for ConditionListener."""

    def test_releases_when_predicate_holds(self, notifier, make_recorder):
        callback = make_recorder()
        notifier.register("x", ConditionListener(callback, lambda value: value == "stop"))

        for value in ("a", "stop", "b"):
            notifier.notify("x", value)

        assert callback.args == [("a",), ("stop",)]
        assert "x" not in notifier

    def test_predicate_receives_kwargs(self, notifier, make_recorder):
        callback = make_recorder()
        listener = ConditionListener(callback, lambda **kw: kw.get("done", False))
        notifier.register("x", listener)

        notifier.notify("x", done=False)
        assert listener.released is False
        notifier.notify("x", done=True)
        assert listener.released is True

    def test_non_callable_predicate(self):
        with pytest.raises(InvalidArgument):
            ConditionListener(print, True)

    def test_condition_on_one_event_releases_all(self, notifier, make_recorder):
        callback = make_recorder()
        listener = ConditionListener(callback, lambda value: value == "stop")
        notifier.register("x", listener)
        notifier.register("y", listener)

        notifier.notify("y", "stop")
        notifier.notify("x", "late")

        assert callback.args == [("stop",)]
        assert notifier.events() == []

    def test_callback_error_skips_predicate(self, notifier, reported):
        """The callback's exception is the one that gets reported."""
        boom = ValueError("callback failed")

        def failing(value):
            raise boom

        predicate = MagicMock(side_effect=RuntimeError("predicate failed"))
        listener = ConditionListener(failing, predicate)
        notifier.register("x", listener)

        notifier.notify("x", "stop")

        predicate.assert_not_called()
        assert reported[0].error is boom
        assert listener.released is False
