"""Testdaten-Generator für den Stundenplan-Editor.

Erzeugt einen Demo-Stundenplan mit absichtlichen Überschneidungen, damit
Lanes, Konfliktprüfung und Vorschau sichtbar etwas zu tun haben.

Absichtliche Engpässe:
  1. Montag 09:00: zwei Gruppen im selben Raum zur selben Zeit
  2. Dienstag 10:00: drei gleichzeitige Termine → drei Lanes
  3. Mittwoch 12:00–13:00: Raumsperrung (nur für die Server-Prüfung sichtbar)
  4. Einige Termine sind gesperrt (is_locked) und lassen sich nicht ziehen
"""

import random
from typing import Optional

from data.memory_backend import InMemoryBackend
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings

# ─── Stammdaten ───────────────────────────────────────────────────────────────

_CLASS_GROUPS: list[tuple[int, str]] = [
    (1, "5a"), (2, "5b"), (3, "6a"), (4, "6b"), (5, "7a"), (6, "7b"),
]

_ROOMS: list[tuple[int, str]] = [
    (101, "R101"), (102, "R102"), (103, "R103"),
    (201, "Chemie 1"), (202, "Physik 1"), (301, "Turnhalle"),
]


class FakeScheduleGenerator:
    """Generiert einen vollständigen Demo-Stundenplan (Einstellungen + Termine)."""

    def __init__(
        self,
        seed: Optional[int] = None,
        timetable_id: int = 1,
        lessons_per_group: int = 12,
    ) -> None:
        self.rng = random.Random(seed)
        self.timetable_id = timetable_id
        self.lessons_per_group = lessons_per_group
        self._next_id = 1

    # ─── Einstellungen ────────────────────────────────────────────────────────

    def _generate_settings(self) -> TimetableSettings:
        return TimetableSettings(
            timetable=self.timetable_id,
            slot_duration_minutes=30,
            preferred_class_duration=60,
            min_break_between_classes=0,
            max_consecutive_classes=4,
            start_hour=8,
            end_hour=17,
        )

    # ─── Termine ──────────────────────────────────────────────────────────────

    def _make_entry(
        self, day: str, start: int, group: tuple[int, str], room: tuple[int, str],
        is_locked: bool = False,
    ) -> ScheduleEntry:
        entry = ScheduleEntry(
            id=self._next_id,
            timetable=self.timetable_id,
            day_of_week=day,
            start_time=start,
            class_group=group[0],
            class_group_name=group[1],
            room=room[0],
            room_name=room[1],
            is_locked=is_locked,
        )
        self._next_id += 1
        return entry

    def _generate_entries(self, settings: TimetableSettings) -> list[ScheduleEntry]:
        """Verteilt pro Gruppe Termine auf freie Stunden (ohne Eigen-Überschneidung)."""
        duration = settings.fixed_duration
        days = settings.enabled_days
        hours = list(range(settings.window_start, settings.window_end - duration + 1, 60))
        entries: list[ScheduleEntry] = []

        # ── Engpass #1: Doppelbelegung R101 am Montag ──
        entries.append(self._make_entry("monday", 9 * 60, _CLASS_GROUPS[0], _ROOMS[0]))
        entries.append(self._make_entry("monday", 9 * 60, _CLASS_GROUPS[1], _ROOMS[0]))

        # ── Engpass #2: drei parallele Termine am Dienstag ──
        for group, room in zip(_CLASS_GROUPS[2:5], _ROOMS[3:6]):
            entries.append(self._make_entry("tuesday", 10 * 60, group, room))

        taken = {(e.class_group, e.day_of_week, e.start_time) for e in entries}
        for group in _CLASS_GROUPS:
            placed = sum(1 for e in entries if e.class_group == group[0])
            free = [
                (day, start) for day in days for start in hours
                if (group[0], day, start) not in taken
            ]
            self.rng.shuffle(free)
            for day, start in free[: max(0, self.lessons_per_group - placed)]:
                room = self.rng.choice(_ROOMS)
                locked = self.rng.random() < 0.1
                entries.append(self._make_entry(day, start, group, room, is_locked=locked))
                taken.add((group[0], day, start))

        return sorted(entries, key=lambda e: (days.index(e.day_of_week), e.start_time, e.id))

    def _generate_blocked(self) -> list[ConflictEntry]:
        # ── Engpass #3: Raumsperrung am Mittwoch ──
        return [ConflictEntry(
            id=900,
            day_of_week="wednesday",
            start_time="12:00",
            end_time="13:00",
            room=_ROOMS[0][0],
            room_name=_ROOMS[0][1],
            note="Raumsperrung (Prüfung)",
        )]

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self) -> InMemoryBackend:
        """Erzeugt den Datensatz als lokales Backend."""
        self._next_id = 1
        settings = self._generate_settings()
        return InMemoryBackend(
            timetable_id=self.timetable_id,
            settings=settings,
            entries=self._generate_entries(settings),
            blocked=self._generate_blocked(),
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, backend: InMemoryBackend) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        entries = backend.entries
        console = Console()
        table = Table(title="Erzeugter Demo-Stundenplan", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        table.add_row("Termine", str(len(entries)),
                      f"{sum(1 for e in entries if e.is_locked)} gesperrt")
        table.add_row("Klassengruppen", str(len({e.class_group for e in entries})), "")
        table.add_row("Räume", str(len({e.room for e in entries})), "")
        table.add_row("Raumsperren", str(len(backend.blocked)), "")
        if backend.settings:
            s = backend.settings
            table.add_row(
                "Raster", f"{s.slot_duration_minutes} min",
                f"{s.start_hour:02d}:00–{s.end_hour:02d}:00, Dauer {s.fixed_duration} min",
            )

        console.print(table)
