"""Erfolgs- und Fehlermeldungen für die Oberfläche, mit automatischem Ausblenden."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    created_at: float


class NotificationCenter:
    """Hält höchstens eine aktuelle Meldung.

    Eine neue Meldung ersetzt die alte. Nach auto_dismiss_seconds gilt die
    Meldung als ausgeblendet; die Uhr ist für Tests austauschbar.
    """

    def __init__(
        self,
        auto_dismiss_seconds: float = 4.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.auto_dismiss_seconds = auto_dismiss_seconds
        self._clock = clock
        self._current: Optional[Notification] = None
        self.history: list[Notification] = []

    def push(self, kind: NotificationKind, message: str) -> Notification:
        note = Notification(kind=kind, message=message, created_at=self._clock())
        self._current = note
        self.history.append(note)
        logger.debug(f"Meldung ({kind.value}): {message}")
        return note

    def success(self, message: str) -> Notification:
        return self.push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationKind.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.push(NotificationKind.INFO, message)

    @property
    def current(self) -> Optional[Notification]:
        note = self._current
        if note is None:
            return None
        if self._clock() - note.created_at >= self.auto_dismiss_seconds:
            self._current = None
            return None
        return note

    def dismiss(self) -> None:
        self._current = None
