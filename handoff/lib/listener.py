"""Listener contracts: release handles and the cleanup-registration capability."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Hashable

if TYPE_CHECKING:
    from handoff.lib.notifier import Notifier


def listener_identity(listener: Callable[..., Any]) -> Hashable:
    """Return the key a listener is deduplicated by.

    Listeners are compared by identity. Bound methods are rebuilt on every
    attribute access, so they are keyed by their instance and function instead.
    """
    if inspect.ismethod(listener):
        return (id(listener.__self__), id(listener.__func__))
    return id(listener)


class ReleaseHandle:
    """Zero-argument callable that removes exactly one registration.

    The first call removes the registration it was created for. Every later
    call is a no-op, and a stale handle never touches a newer registration of
    the same listener. Safe to call from inside a running dispatch.
    """

    __slots__ = ("_notifier", "event", "listener", "_released")

    def __init__(self, notifier: Notifier, event: Hashable, listener: Callable[..., Any]) -> None:
        self._notifier = notifier
        self.event = event
        self.listener = listener
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def __call__(self) -> None:
        if self._released:
            return
        self._notifier._release(self)

    def __repr__(self) -> str:
        state = "released" if self._released else "active"
        return f"<ReleaseHandle event={self.event!r} listener={self.listener!r} {state}>"


class CleanupListener(ABC):
    """Listener that wants to decide for itself when it is unregistered.

    The Notifier hands the release handle of every new registration to
    ``register_cleanup`` right after storing it. The listener may call the
    handle at any later point (timeout, external signal, condition met).
    Listeners that are not instances of this class are treated as plain
    callables and never receive their handle.
    """

    @abstractmethod
    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...

    @abstractmethod
    def register_cleanup(self, release: ReleaseHandle) -> None: ...
