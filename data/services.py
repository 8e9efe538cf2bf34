"""Schnittstellen zu den externen Diensten (Termine, Konfliktprüfung, Einstellungen).

Der Editor kennt nur diese Protokolle. Implementierungen: TimetableApiClient
(REST über httpx) und InMemoryBackend (JSON-Datei, für CLI und Tests).
"""

from typing import Any, Optional, Protocol, runtime_checkable

from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings


class ServiceError(Exception):
    """Fehler beim Zugriff auf einen externen Dienst."""


@runtime_checkable
class ScheduleService(Protocol):
    """Persistenz der Termine."""

    async def list_entries(self, filters: dict[str, Any]) -> list[ScheduleEntry]:
        ...

    async def update_entry(
        self, entry_id: int, start_time: str, end_time: str, day_of_week: str
    ) -> ScheduleEntry:
        ...


@runtime_checkable
class ConflictService(Protocol):
    """Maßgebliche Konfliktprüfung des Backends."""

    async def check_conflicts(
        self,
        timetable_id: int,
        day_index: int,
        start_time: str,
        end_time: str,
        exclude_id: Optional[int] = None,
    ) -> list[ConflictEntry]:
        ...


@runtime_checkable
class SettingsProvider(Protocol):
    """Lesender Zugriff auf die Stundenplan-Einstellungen."""

    async def get_settings(self, timetable_id: int) -> Optional[TimetableSettings]:
        ...
