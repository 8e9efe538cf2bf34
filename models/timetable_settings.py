"""Stundenplan-Einstellungen aus dem Backend (nur lesend)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config.defaults import (
    ALL_DAYS,
    DEFAULT_ENABLED_DAYS,
    DEFAULT_END_HOUR,
    DEFAULT_SLOT_MINUTES,
    DEFAULT_START_HOUR,
)
from models.clock import parse_hour


class TimetableSettings(BaseModel):
    """Rastergröße, feste Termindauer und Regeln eines Stundenplans.

    Fehlende Werte werden mit den Rückfallwerten des Editors belegt
    (60-Minuten-Slots, 08:00–17:00, Mo–Fr). 0 deaktiviert eine Regel.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    timetable: Optional[int] = None
    slot_duration_minutes: int = Field(DEFAULT_SLOT_MINUTES, ge=1)
    preferred_class_duration: Optional[int] = Field(None, ge=0)
    min_break_between_classes: int = Field(0, ge=0)
    max_consecutive_classes: int = Field(0, ge=0)
    start_hour: int = Field(DEFAULT_START_HOUR, ge=0, le=24)
    end_hour: int = Field(DEFAULT_END_HOUR, ge=0, le=24)
    enabled_days: list[str] = Field(default_factory=lambda: list(DEFAULT_ENABLED_DAYS))

    @field_validator("slot_duration_minutes", "min_break_between_classes",
                     "max_consecutive_classes", mode="before")
    @classmethod
    def _none_to_default(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("start_hour", mode="before")
    @classmethod
    def _parse_start(cls, v):
        return parse_hour(v, DEFAULT_START_HOUR)

    @field_validator("end_hour", mode="before")
    @classmethod
    def _parse_end(cls, v):
        return parse_hour(v, DEFAULT_END_HOUR)

    @field_validator("enabled_days", mode="before")
    @classmethod
    def _normalize_days(cls, v):
        if not v:
            return list(DEFAULT_ENABLED_DAYS)
        days = [str(d).strip().lower() for d in v]
        unknown = [d for d in days if d not in ALL_DAYS]
        if unknown:
            raise ValueError(f"Unbekannte Wochentage: {unknown}")
        return days

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_hour <= self.start_hour:
            raise ValueError(
                f"end_hour ({self.end_hour}) muss nach start_hour ({self.start_hour}) liegen"
            )
        return self

    @property
    def fixed_duration(self) -> int:
        """Feste Termindauer in Minuten (bevorzugte Dauer, sonst Slot-Länge)."""
        return self.preferred_class_duration or self.slot_duration_minutes

    @property
    def window_start(self) -> int:
        return self.start_hour * 60

    @property
    def window_end(self) -> int:
        return self.end_hour * 60
