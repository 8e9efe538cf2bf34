"""InMemoryBackend – Termine, Einstellungen und Konfliktprüfung aus einer JSON-Datei.

Implementiert ScheduleService, ConflictService und SettingsProvider ohne
Netzwerk. Wird von der CLI (lokale Datendatei) und in Tests verwendet.

Dateiformat:
    {
      "timetable": 1,
      "settings": {...TimetableSettings...},
      "entries": [{"id": 1, "day_of_week": "monday", "start_time": "09:00", ...}],
      "blocked": [{"id": 900, "day_of_week": "monday", "start_time": "12:00",
                   "end_time": "13:00", "note": "Raumsperrung"}]
    }

"blocked" sind Belegungen, die nicht zum Stundenplan gehören (Raumsperren,
andere Pläne); sie tauchen nur in der Konfliktprüfung auf.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from data.services import ServiceError
from models.clock import format_time, parse_time
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings

logger = logging.getLogger(__name__)


def _entry_to_json(entry: ScheduleEntry) -> dict:
    data = entry.model_dump()
    data["start_time"] = format_time(entry.start_time)
    if entry.end_time is not None:
        data["end_time"] = format_time(entry.end_time)
    return data


class InMemoryBackend:
    """Lokales Backend für genau einen Stundenplan."""

    def __init__(
        self,
        timetable_id: int = 1,
        settings: Optional[TimetableSettings] = None,
        entries: Optional[list[ScheduleEntry]] = None,
        blocked: Optional[list[ConflictEntry]] = None,
    ) -> None:
        self.timetable_id = timetable_id
        self.settings = settings
        self._entries: dict[int, ScheduleEntry] = {e.id: e for e in (entries or [])}
        self.blocked: list[ConflictEntry] = list(blocked or [])
        # Fehlerinjektion für Tests und Demos
        self.fail_updates = False
        self.fail_conflict_checks = False
        self.fail_loads = False
        self.update_calls: list[dict] = []
        self.conflict_calls: list[dict] = []

    # ─── Zugriff ───

    @property
    def entries(self) -> list[ScheduleEntry]:
        return sorted(self._entries.values(), key=lambda e: e.id)

    def get(self, entry_id: int) -> ScheduleEntry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise ServiceError(f"Termin {entry_id} existiert nicht") from None

    @property
    def duration(self) -> int:
        return (self.settings or TimetableSettings()).fixed_duration

    # ─── SettingsProvider ───

    async def get_settings(self, timetable_id: int) -> Optional[TimetableSettings]:
        if self.fail_loads:
            raise ServiceError("Einstellungen nicht erreichbar")
        if timetable_id != self.timetable_id:
            return None
        return self.settings

    # ─── ScheduleService ───

    async def list_entries(self, filters: dict[str, Any]) -> list[ScheduleEntry]:
        if self.fail_loads:
            raise ServiceError("Terminliste nicht erreichbar")
        timetable = filters.get("timetable")
        if timetable is not None and int(timetable) != self.timetable_id:
            return []
        result = self.entries
        if filters.get("class_group") is not None:
            result = [e for e in result if e.class_group == int(filters["class_group"])]
        if filters.get("room") is not None:
            result = [e for e in result if e.room == int(filters["room"])]
        search = (filters.get("search") or "").strip().lower()
        if search:
            result = [
                e for e in result
                if search in e.class_group_name.lower() or search in e.room_name.lower()
            ]
        return result

    async def update_entry(
        self, entry_id: int, start_time: str, end_time: str, day_of_week: str
    ) -> ScheduleEntry:
        self.update_calls.append({
            "id": entry_id, "start_time": start_time,
            "end_time": end_time, "day_of_week": day_of_week,
        })
        if self.fail_updates:
            raise ServiceError(f"Speichern von Termin {entry_id} fehlgeschlagen")
        current = self.get(entry_id)
        updated = current.model_copy(update={
            "start_time": parse_time(start_time),
            "end_time": parse_time(end_time),
            "day_of_week": day_of_week,
        })
        self._entries[entry_id] = updated
        logger.info(f"Termin {entry_id} gespeichert: {day_of_week} {start_time}–{end_time}")
        return updated

    # ─── ConflictService ───

    async def check_conflicts(
        self,
        timetable_id: int,
        day_index: int,
        start_time: str,
        end_time: str,
        exclude_id: Optional[int] = None,
    ) -> list[ConflictEntry]:
        """Alle Termine und Sperren am Tag, die [start, end) überschneiden."""
        self.conflict_calls.append({
            "timetable": timetable_id, "day": day_index,
            "start_time": start_time, "end_time": end_time, "exclude_id": exclude_id,
        })
        if self.fail_conflict_checks:
            raise ServiceError("Konfliktprüfung nicht erreichbar")
        if timetable_id != self.timetable_id:
            return []
        days = (self.settings or TimetableSettings()).enabled_days
        if not 0 <= day_index < len(days):
            return []
        day = days[day_index]
        start, end = parse_time(start_time), parse_time(end_time)

        conflicts: list[ConflictEntry] = []
        for e in self.entries:
            if e.id == exclude_id or e.day_of_week != day:
                continue
            e_end = e.start_time + self.duration
            if e.start_time < end and e_end > start:
                conflicts.append(ConflictEntry(**e.model_dump()))
        for b in self.blocked:
            if b.day_of_week != day:
                continue
            b_end = b.end_time if b.end_time is not None else b.start_time + self.duration
            if b.start_time < end and b_end > start:
                conflicts.append(b)
        return conflicts

    # ─── JSON ───

    def to_dict(self) -> dict:
        return {
            "timetable": self.timetable_id,
            "settings": self.settings.model_dump() if self.settings else None,
            "entries": [_entry_to_json(e) for e in self.entries],
            "blocked": [_entry_to_json(b) for b in self.blocked],
        }

    def save_json(self, path: Path) -> None:
        """Speichert Einstellungen, Termine und Sperren als JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    @classmethod
    def load_json(cls, path: Path) -> "InMemoryBackend":
        """Lädt eine Datendatei (siehe Modul-Docstring)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Datendatei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        settings = data.get("settings")
        return cls(
            timetable_id=int(data.get("timetable", 1)),
            settings=TimetableSettings.model_validate(settings) if settings else None,
            entries=[ScheduleEntry.model_validate(e) for e in data.get("entries", [])],
            blocked=[ConflictEntry.model_validate(b) for b in data.get("blocked", [])],
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"InMemoryBackend(timetable={self.timetable_id}, {len(self)} Termine)"
