"""Zeitraster: Slot-Tabelle, Pixel/Minuten-Umrechnung und Tagesliste.

Reine Rechenlogik ohne Oberfläche. Alle Minutenangaben sind Minuten seit
Mitternacht; Pixelangaben sind relativ zur Oberkante einer Tagesspalte.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from config.defaults import default_display
from config.schema import DisplayConfig
from models.clock import format_time, parse_time
from models.timetable_settings import TimetableSettings

__all__ = ["GridSlot", "TimeGrid", "round_half_up", "parse_time", "format_time"]


def round_half_up(value: float) -> int:
    """Kaufmännisches Runden (0.5 → 1), nicht Pythons Banker's Rounding."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class GridSlot:
    """Eine Zeile im Tagesraster (z.B. Index 2 = 10:00 bei 60-Minuten-Slots)."""

    index: int
    minute: int

    @property
    def label(self) -> str:
        return format_time(self.minute)


@dataclass(frozen=True)
class TimeGrid:
    """Sichtbares Wochenraster eines Stundenplans."""

    slot_minutes: int
    duration: int                    # feste Termindauer
    window_start: int
    window_end: int
    days: tuple[str, ...]
    display: DisplayConfig = field(default_factory=default_display)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[TimetableSettings],
        display: Optional[DisplayConfig] = None,
    ) -> "TimeGrid":
        """Baut das Raster aus den Einstellungen (oder den Rückfallwerten)."""
        s = settings or TimetableSettings()
        return cls(
            slot_minutes=s.slot_duration_minutes,
            duration=s.fixed_duration,
            window_start=s.window_start,
            window_end=s.window_end,
            days=tuple(s.enabled_days),
            display=display or default_display(),
        )

    # ─── Pixel-Metriken ───

    @property
    def pixels_per_minute(self) -> float:
        return self.display.pixels_per_minute

    @property
    def slot_px(self) -> float:
        return self.slot_minutes * self.pixels_per_minute

    @property
    def stack_offset_px(self) -> float:
        """Vertikaler Versatz pro Lane im Modus "vertical"."""
        return min(self.display.max_stack_offset_px,
                   self.slot_px * self.display.stack_offset_ratio)

    @property
    def slot_count(self) -> int:
        total = max(0, self.window_end - self.window_start)
        return max(1, math.ceil(total / self.slot_minutes))

    @property
    def total_height(self) -> int:
        return max(48, round(self.slot_count * self.slot_px))

    def slots(self) -> list[GridSlot]:
        """Alle Slot-Zeilen des sichtbaren Fensters."""
        return [
            GridSlot(index=i, minute=self.window_start + i * self.slot_minutes)
            for i in range(self.slot_count)
        ]

    def y_from_minute(self, minute: int) -> float:
        return (minute - self.window_start) * self.pixels_per_minute

    def minute_from_offset(self, rel_y: float) -> int:
        """Pixel-Abstand zur Spaltenoberkante → Minute (nicht gerastert)."""
        minutes = round_half_up(max(0.0, rel_y) / self.pixels_per_minute)
        return max(0, minutes + self.window_start)

    # ─── Rasterung ───

    def snap(self, minute: int) -> int:
        """Rundet auf das nächste Slot-Vielfache relativ zu window_start."""
        offset = minute - self.window_start
        return self.window_start + round_half_up(offset / self.slot_minutes) * self.slot_minutes

    @property
    def latest_start(self) -> int:
        """Spätester gerasterter Beginn, bei dem der Termin noch ins Fenster passt."""
        room = self.window_end - self.duration - self.window_start
        if room <= 0:
            return self.window_start
        return self.window_start + (room // self.slot_minutes) * self.slot_minutes

    def clamp_start(self, minute: int) -> int:
        """Hält einen gerasterten Beginn im sichtbaren Fenster."""
        return max(self.window_start, min(minute, self.latest_start))

    def snap_and_clamp(self, minute: int) -> int:
        return self.clamp_start(self.snap(minute))

    def is_on_grid(self, minute: int) -> bool:
        return (minute - self.window_start) % self.slot_minutes == 0

    # ─── Tage ───

    def day_index(self, day: str) -> Optional[int]:
        """Index eines Wochentags im Raster, None wenn der Tag nicht aktiv ist."""
        try:
            return self.days.index(day)
        except ValueError:
            return None

    def day_at(self, index: int) -> str:
        """Tag zum Index, an erstem/letztem Tag begrenzt (kein Umlauf)."""
        index = max(0, min(index, len(self.days) - 1))
        return self.days[index]

    # ─── Spaltenbreite ───

    @staticmethod
    def column_width_for(available_width: float, day_count: int) -> int:
        """Spaltenbreite aus der verfügbaren Breite der Oberfläche (80 px Zeitleiste)."""
        available = max(200, available_width - 80)
        return max(100, math.floor(available / max(1, day_count)))
