"""ScheduleStore – die einzige veränderliche Terminliste im Speicher.

Nur der CommitManager ruft apply/restore auf; alle anderen lesen.
"""

import logging
from typing import Iterable, Iterator, Optional

from models.schedule_entry import ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleStore:
    """Geordnete Terminliste mit Zugriff über die ID."""

    def __init__(self, entries: Iterable[ScheduleEntry] = ()) -> None:
        self._entries: dict[int, ScheduleEntry] = {}
        self.replace(entries)

    def replace(self, entries: Iterable[ScheduleEntry]) -> None:
        """Ersetzt die komplette Liste (nach dem Laden vom Backend)."""
        self._entries = {e.id: e for e in entries}
        logger.debug(f"Terminliste ersetzt: {len(self._entries)} Termine")

    def get(self, entry_id: int) -> Optional[ScheduleEntry]:
        return self._entries.get(entry_id)

    def require(self, entry_id: int) -> ScheduleEntry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise KeyError(f"Termin {entry_id} nicht geladen")
        return entry

    def apply(self, entry: ScheduleEntry) -> ScheduleEntry:
        """Setzt den Termin auf die neue Lage und gibt den alten Stand zurück."""
        previous = self.require(entry.id)
        self._entries[entry.id] = entry
        return previous

    def restore(self, snapshot: ScheduleEntry) -> None:
        """Stellt den Stand vor einem Commit wieder her."""
        self._entries[snapshot.id] = snapshot

    def snapshot(self) -> list[ScheduleEntry]:
        return list(self._entries.values())

    @property
    def entries(self) -> list[ScheduleEntry]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries
