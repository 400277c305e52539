from handoff.lib.errors import InvalidArgument, ListenerError, NotifierError
from handoff.lib.listener import CleanupListener, ReleaseHandle
from handoff.lib.notifier import Notifier
from handoff.version import __version__

PACKAGE = __package__
VERSION = __version__

__all__ = [
    "VERSION",
    "PACKAGE",
    Notifier.__name__,
    ReleaseHandle.__name__,
    CleanupListener.__name__,
    NotifierError.__name__,
    InvalidArgument.__name__,
    ListenerError.__name__,
]
