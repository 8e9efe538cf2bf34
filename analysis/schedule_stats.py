"""Filter und Kennzahlen für die angezeigte Terminliste."""

from typing import Iterable, Optional

from pydantic import BaseModel

from models.schedule_entry import ScheduleEntry


class EntryFilter(BaseModel):
    """Anzeige-Filter: Freitext, Raum und Klassengruppe (leer = alles)."""

    search: str = ""
    room: Optional[int] = None
    class_group: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return bool(self.search.strip()) or self.room is not None or self.class_group is not None

    def matches(self, entry: ScheduleEntry) -> bool:
        if self.room is not None and entry.room != self.room:
            return False
        if self.class_group is not None and entry.class_group != self.class_group:
            return False
        query = self.search.strip().lower()
        if query:
            haystack = " ".join([
                entry.class_group_name,
                entry.room_name,
                str(entry.class_group or ""),
            ]).lower()
            return query in haystack
        return True


def filter_entries(
    entries: Iterable[ScheduleEntry], entry_filter: Optional[EntryFilter] = None
) -> list[ScheduleEntry]:
    """Termine, die zum Filter passen, in Eingabereihenfolge."""
    if entry_filter is None or not entry_filter.is_active:
        return list(entries)
    return [e for e in entries if entry_filter.matches(e)]


class ScheduleStats(BaseModel):
    """Kennzahlen der (gefilterten) Terminliste."""

    total_classes: int
    rooms_used: int
    groups_scheduled: int
    locked_classes: int

    @classmethod
    def from_entries(cls, entries: Iterable[ScheduleEntry]) -> "ScheduleStats":
        entries = list(entries)
        return cls(
            total_classes=len(entries),
            rooms_used=len({e.room_name for e in entries if e.room_name}),
            groups_scheduled=len({e.class_group for e in entries}),
            locked_classes=sum(1 for e in entries if e.is_locked),
        )

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.table import Table
        from rich import box

        table = Table(title="Kennzahlen", box=box.ROUNDED)
        table.add_column("Kennzahl", style="bold cyan")
        table.add_column("Wert", justify="right")
        table.add_row("Termine", str(self.total_classes))
        table.add_row("Belegte Räume", str(self.rooms_used))
        table.add_row("Klassengruppen", str(self.groups_scheduled))
        table.add_row("Gesperrte Termine", str(self.locked_classes))
        Console().print(table)
