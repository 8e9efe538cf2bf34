"""Datenmodell für einen Termin im Wochenraster (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from models.clock import format_time, parse_time


class ScheduleEntry(BaseModel):
    """Ein einzelner Unterrichtstermin einer Klassengruppe.

    start_time wird intern in Minuten seit Mitternacht gehalten; das Backend
    liefert "HH:MM". Die Dauer steht nicht am Termin, sondern kommt aus den
    Stundenplan-Einstellungen (feste Termindauer).
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    day_of_week: str                        # "monday", "tuesday", ...
    start_time: int                         # Minuten seit Mitternacht
    end_time: Optional[int] = None          # nur informativ, nicht für Platzierung
    timetable: Optional[int] = None
    class_group: Optional[int] = None
    class_group_name: str = ""
    room: Optional[int] = None
    room_name: str = ""
    is_locked: bool = False

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_clock(cls, v):
        if v is None:
            return None
        return parse_time(v)

    @field_validator("day_of_week")
    @classmethod
    def _normalize_day(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("class_group_name", "room_name", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""

    @property
    def start_label(self) -> str:
        return format_time(self.start_time)

    def moved(self, day_of_week: str, start_time: int) -> "ScheduleEntry":
        """Kopie mit neuer Lage; alle anderen Felder bleiben unverändert."""
        return self.model_copy(update={
            "day_of_week": day_of_week,
            "start_time": start_time,
        })

    def __str__(self) -> str:
        name = self.class_group_name or f"Gruppe {self.class_group}"
        return f"#{self.id} {name} ({self.day_of_week} {self.start_label})"


class ConflictEntry(ScheduleEntry):
    """Vom Backend gemeldeter Termin, der eine Kandidaten-Lage überschneidet."""

    note: str = ""

    @field_validator("note", mode="before")
    @classmethod
    def _note_none(cls, v):
        return v or ""
