"""Pytest fixtures for handoff tests."""

from __future__ import annotations

from typing import Any

import pytest

from handoff.lib.listener import CleanupListener, ReleaseHandle
from handoff.lib.notifier import Notifier


class Recorder:
    """Plain listener that remembers every call it receives."""

    def __init__(self, name: str = "recorder", log: list | None = None):
        self.name = name
        self.calls: list[tuple[tuple, dict]] = []
        self._log = log

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.calls.append((args, kwargs))
        if self._log is not None:
            self._log.append(self.name)

    @property
    def args(self) -> list[tuple]:
        return [args for args, _ in self.calls]

    def __repr__(self) -> str:
        return f"Recorder({self.name!r})"


class SelfReleasing(CleanupListener):
    """Cleanup-capable listener that stores its handle for the test to fire."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.handles: list[ReleaseHandle] = []

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.calls.append(args)

    def register_cleanup(self, release: ReleaseHandle) -> None:
        self.handles.append(release)


@pytest.fixture
def reported():
    """Collects every ListenerError handed to the notifier's error reporter."""
    return []


@pytest.fixture
def notifier(reported):
    """A fresh Notifier whose listener errors land in ``reported``."""
    return Notifier(error_reporter=reported.append)


@pytest.fixture
def order():
    """Shared call log for checking dispatch order across listeners."""
    return []


@pytest.fixture
def make_recorder(order):
    """Factory for named Recorder listeners sharing the ``order`` log."""

    def _make(name: str = "recorder") -> Recorder:
        return Recorder(name, log=order)

    return _make


@pytest.fixture
def self_releasing():
    return SelfReleasing()
