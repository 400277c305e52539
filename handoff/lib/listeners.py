"""Ready-made listeners that release their own registrations.

A notification reaches a listener without the event name, so these listeners
can't tell which of their registrations a call came through. When the limit
or condition is reached they release every registration they hold.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable

from handoff.lib.errors import InvalidArgument
from handoff.lib.listener import CleanupListener, ReleaseHandle

logger = logging.getLogger(__name__)


class _DelegatingListener(CleanupListener):
    """Forwards calls to a callback and keeps every handle it was given."""

    def __init__(self, callback: Callable[..., Any]) -> None:
        if not callable(callback):
            raise InvalidArgument(f"Callback must be callable, got {type(callback).__name__}")
        self.callback = callback
        self._handles: list[ReleaseHandle] = []
        self._handles_lock = threading.Lock()

    def register_cleanup(self, release: ReleaseHandle) -> None:
        with self._handles_lock:
            self._handles.append(release)

    def release(self) -> None:
        """Release all registrations now. No-op if never registered."""
        with self._handles_lock:
            handles = list(self._handles)
        for handle in handles:
            handle()

    @property
    def handles(self) -> tuple[ReleaseHandle, ...]:
        with self._handles_lock:
            return tuple(self._handles)

    @property
    def released(self) -> bool:
        """True once the listener was registered and none of its registrations remain."""
        handles = self.handles
        return bool(handles) and all(handle.released for handle in handles)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.callback!r})"


class CallLimitListener(_DelegatingListener):
    """Unregisters itself after ``max_calls`` notifications.

    Calls are counted across every event the listener is registered for.
    """

    def __init__(self, callback: Callable[..., Any], max_calls: int = 1) -> None:
        super().__init__(callback)
        if max_calls < 1:
            raise InvalidArgument(f"max_calls must be at least 1, got {max_calls}")
        self.max_calls = max_calls
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            # A snapshot taken before the release may still reach us
            if self.calls >= self.max_calls:
                return None
            self.calls += 1
            exhausted = self.calls >= self.max_calls
        try:
            return self.callback(*args, **kwargs)
        finally:
            if exhausted:
                self.release()


class TimedListener(_DelegatingListener):
    """Drops each registration ``ttl`` seconds after it was made.

    Timers come from ``timer_factory`` (``threading.Timer`` by default), one
    per registration, and run as daemons so they never hold the process open.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        ttl: float,
        timer_factory: Callable[[float, Callable[[], None]], Any] = threading.Timer,
    ) -> None:
        super().__init__(callback)
        if ttl <= 0:
            raise InvalidArgument(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._timer_factory = timer_factory
        self._timers: list[Any] = []

    def register_cleanup(self, release: ReleaseHandle) -> None:
        super().register_cleanup(release)
        timer = self._timer_factory(self.ttl, functools.partial(self._expire, release))
        timer.daemon = True
        self._timers.append(timer)
        timer.start()

    def _expire(self, release: ReleaseHandle) -> None:
        logger.debug(f"{self!r} expired on event << {release.event} >> after {self.ttl}s")
        release()

    def cancel(self) -> None:
        """Stop all timers and release immediately."""
        for timer in self._timers:
            timer.cancel()
        self.release()

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.callback(*args, **kwargs)


class ConditionListener(_DelegatingListener):
    """Unregisters itself once ``predicate`` holds for a delivered notification.

    The callback still receives the notification that satisfied the predicate.
    The predicate is not consulted when the callback raises.
    """

    def __init__(self, callback: Callable[..., Any], predicate: Callable[..., bool]) -> None:
        super().__init__(callback)
        if not callable(predicate):
            raise InvalidArgument(f"Predicate must be callable, got {type(predicate).__name__}")
        self.predicate = predicate

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        result = self.callback(*args, **kwargs)
        if self.predicate(*args, **kwargs):
            self.release()
        return result
