"""Event notifier with subscriber-driven cleanup."""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Hashable

from handoff.lib.errors import InvalidArgument, ListenerError
from handoff.lib.listener import CleanupListener, ReleaseHandle, listener_identity

if TYPE_CHECKING:
    from handoff.lib.settings_manager import SettingsManager

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[ListenerError], None]


def _validate_event(event: Any) -> None:
    if event is None:
        raise InvalidArgument("Event name must not be None")
    try:
        hash(event)
    except TypeError:
        raise InvalidArgument(f"Event name must be hashable, got {type(event).__name__}")
    if isinstance(event, str) and not event:
        raise InvalidArgument("Event name must not be an empty string")


class Notifier:
    """Per-event listener registry that lets listeners unregister themselves.

    Every successful ``register`` returns a ``ReleaseHandle``. Listeners that
    subclass ``CleanupListener`` also receive that handle, once, through
    ``register_cleanup``. ``notify`` dispatches to a snapshot of the listeners
    taken before any listener runs, so releases and registrations made during
    dispatch only affect later notifications. A listener that raises is
    reported and skipped; the rest of the snapshot still runs.
    """

    def __init__(
        self,
        error_reporter: ErrorReporter | None = None,
        thread_safe: bool = True,
        log_dispatch: bool = False,
        error_log_level: int | str = logging.ERROR,
    ) -> None:
        """Create an empty notifier.

        Args:
            error_reporter: Called with a ListenerError for every listener failure.
                Defaults to logging the failure with its traceback.
            thread_safe: Guard the registry with a lock. Disable only when the
                notifier is confined to a single thread.
            log_dispatch: Emit a debug record for every notify call.
            error_log_level: Level used by the default error reporter.
        """
        # event -> {listener identity: handle}, both in insertion order
        self._registry: dict[Hashable, dict[Hashable, ReleaseHandle]] = {}
        self._lock = threading.RLock() if thread_safe else None
        self._error_reporter = error_reporter or self._log_listener_error
        self._log_dispatch = log_dispatch
        if isinstance(error_log_level, str):
            error_log_level = logging.getLevelName(error_log_level.upper())
        if not isinstance(error_log_level, int):
            raise InvalidArgument(f"Unknown log level: {error_log_level!r}")
        self._error_log_level = error_log_level

    @classmethod
    def from_settings(
        cls, settings: SettingsManager, error_reporter: ErrorReporter | None = None
    ) -> Notifier:
        """Build a notifier configured from a SettingsManager."""
        return cls(error_reporter=error_reporter, **settings.as_kwargs())

    def _guard(self) -> contextlib.AbstractContextManager:
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def register(self, event: Hashable, listener: Callable[..., Any]) -> ReleaseHandle:
        """Register a listener for an event and return its release handle.

        Registering the same listener twice for one event returns the handle of
        the existing registration and does not call ``register_cleanup`` again.
        A ``register_cleanup`` that raises is reported like a failing listener;
        the registration stays active and its handle is still returned.
        """
        _validate_event(event)
        if not callable(listener):
            raise InvalidArgument(f"Listener must be callable, got {type(listener).__name__}")

        key = listener_identity(listener)
        with self._guard():
            listeners = self._registry.setdefault(event, {})
            existing = listeners.get(key)
            if existing is not None:
                return existing
            handle = ReleaseHandle(self, event, listener)
            listeners[key] = handle

        logger.debug(f"Registered {listener!r} for event << {event} >>")

        # Outside the lock: the listener may release itself right away
        if isinstance(listener, CleanupListener):
            try:
                listener.register_cleanup(handle)
            except Exception as e:
                error = ListenerError(event, listener, e)
                error.__cause__ = e
                self._report(error)
        return handle

    def unregister(self, event: Hashable, listener: Callable[..., Any]) -> None:
        """Remove a listener from an event. Does nothing if it isn't registered."""
        try:
            key = listener_identity(listener)
            with self._guard():
                listeners = self._registry.get(event)
                if listeners is None:
                    return
                handle = listeners.pop(key, None)
                if handle is None:
                    return
                handle._released = True
                if not listeners:
                    del self._registry[event]
        except TypeError:
            # Unhashable event keys can never have been registered
            return
        logger.debug(f"Unregistered {listener!r} from event << {event} >>")

    def _release(self, handle: ReleaseHandle) -> None:
        key = listener_identity(handle.listener)
        with self._guard():
            if handle._released:
                return
            handle._released = True
            listeners = self._registry.get(handle.event)
            # A newer registration of the same listener must survive a stale handle
            if listeners is None or listeners.get(key) is not handle:
                return
            del listeners[key]
            if not listeners:
                del self._registry[handle.event]
        logger.debug(f"Released {handle.listener!r} from event << {handle.event} >>")

    def unregister_all(self, event: Hashable | None = None) -> None:
        """Drop every registration for ``event``, or for all events if omitted."""
        with self._guard():
            if event is None:
                dropped = list(self._registry.values())
                self._registry.clear()
            else:
                try:
                    listeners = self._registry.pop(event, None)
                except TypeError:
                    return
                dropped = [listeners] if listeners else []
            for listeners in dropped:
                for handle in listeners.values():
                    handle._released = True

    def notify(self, event: Hashable, *args: Any, **kwargs: Any) -> None:
        """Call every listener registered for ``event`` with the given arguments.

        Listeners run in registration order, outside the registry lock. The
        set of listeners is fixed when the call starts. Exceptions raised by a
        listener go to the error reporter and never escape this method.
        """
        _validate_event(event)
        with self._guard():
            listeners = self._registry.get(event)
            snapshot = [handle.listener for handle in listeners.values()] if listeners else []

        if self._log_dispatch:
            logger.debug(f"Notifying {len(snapshot)} listener(s) of event << {event} >>")

        for listener in snapshot:
            try:
                listener(*args, **kwargs)
            except Exception as e:
                error = ListenerError(event, listener, e)
                error.__cause__ = e
                self._report(error)

    def _report(self, error: ListenerError) -> None:
        try:
            self._error_reporter(error)
        except Exception:
            logger.exception(f"Error reporter failed while handling: {error}")

    def _log_listener_error(self, error: ListenerError) -> None:
        logger.log(self._error_log_level, str(error), exc_info=error.error)

    def events(self) -> list[Hashable]:
        """Event names that currently have at least one listener."""
        with self._guard():
            return list(self._registry)

    def listeners(self, event: Hashable) -> tuple[Callable[..., Any], ...]:
        """Listeners registered for ``event``, in registration order."""
        with self._guard():
            listeners = self._registry.get(event)
            return tuple(handle.listener for handle in listeners.values()) if listeners else ()

    def is_registered(self, event: Hashable, listener: Callable[..., Any]) -> bool:
        with self._guard():
            listeners = self._registry.get(event)
            return listeners is not None and listener_identity(listener) in listeners

    def __len__(self) -> int:
        with self._guard():
            return sum(len(listeners) for listeners in self._registry.values())

    def __contains__(self, event: object) -> bool:
        try:
            with self._guard():
                return event in self._registry
        except TypeError:
            return False
