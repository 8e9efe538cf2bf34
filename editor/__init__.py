"""Editor-Modul: Interaktion, Konfliktprüfung und optimistisches Speichern."""

from .commit import CommitManager, CommitResult, CommitStatus
from .controller import ColumnBounds, InteractionController, InteractionError
from .notifications import Notification, NotificationCenter, NotificationKind
from .requests import CancellationToken, RequestGenerations
from .session import EditorSession
from .store import ScheduleStore

__all__ = [
    "CommitManager",
    "CommitResult",
    "CommitStatus",
    "ColumnBounds",
    "InteractionController",
    "InteractionError",
    "Notification",
    "NotificationCenter",
    "NotificationKind",
    "CancellationToken",
    "RequestGenerations",
    "EditorSession",
    "ScheduleStore",
]
