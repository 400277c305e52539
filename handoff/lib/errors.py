"""Exception types raised or reported by the Notifier."""

from __future__ import annotations

from typing import Any, Callable


class NotifierError(Exception):
    """Base class for every error originating from handoff."""


class InvalidArgument(NotifierError, ValueError):
    """A malformed event key or non-callable listener was passed to the Notifier.

    Raised synchronously, before the registry is touched.
    """


class ListenerError(NotifierError):
    """A listener raised while being notified.

    Never raised out of ``Notifier.notify``. Instances are handed to the
    notifier's error reporter so dispatch can continue with the next listener.
    """

    def __init__(self, event: Any, listener: Callable[..., Any], error: Exception) -> None:
        self.event = event
        self.listener = listener
        self.error = error
        super().__init__(f"Listener {listener!r} failed on event {event!r}: {error!r}")
