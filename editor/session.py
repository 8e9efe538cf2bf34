"""EditorSession – Fassade für die Oberfläche.

Lädt Einstellungen und Termine, hält Raster, Validator, CommitManager und
Controller zusammen und liefert der Oberfläche fertige Tagesspalten,
Vorschau-Geometrie, PendingSave, Meldungen und Kennzahlen.

Ladefehler sind nicht fatal: es wird mit dem letzten bekannten Stand
weitergearbeitet und eine Fehlermeldung angezeigt.
"""

import dataclasses
import logging
import time
from typing import Callable, Optional

from analysis.conflict_validator import ConflictValidator
from analysis.schedule_stats import EntryFilter, ScheduleStats, filter_entries
from config.defaults import default_editor_config
from config.schema import EditorConfig, StackingMode
from data.services import ConflictService, ScheduleService, ServiceError, SettingsProvider
from editor.commit import CommitManager
from editor.controller import InteractionController
from editor.notifications import Notification, NotificationCenter
from editor.requests import CancellationToken, RequestGenerations
from editor.store import ScheduleStore
from grid.placement import layout_day_columns, preview_geometry
from grid.time_grid import TimeGrid
from models.placement import DayColumn, Geometry, PendingSave, Preview
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings

logger = logging.getLogger(__name__)

ENTRIES_KEY = "entries"


class EditorSession:
    """Ein geöffneter Stundenplan im Editor."""

    def __init__(
        self,
        schedules: ScheduleService,
        conflicts: ConflictService,
        settings_provider: SettingsProvider,
        config: Optional[EditorConfig] = None,
        timetable_id: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or default_editor_config()
        self.timetable_id = timetable_id or self.config.timetable_id
        self.schedules = schedules
        self.conflicts = conflicts
        self.settings_provider = settings_provider

        self.token = CancellationToken()
        self.generations = RequestGenerations()
        self.notifications = NotificationCenter(
            self.config.notifications.auto_dismiss_seconds, clock=clock
        )
        self.store = ScheduleStore()
        self.settings: Optional[TimetableSettings] = None
        self.entry_filter = EntryFilter()
        self.stacking_mode: StackingMode = self.config.display.stacking_mode
        self.conflict_ids: set[int] = set()

        self.grid = TimeGrid.from_settings(None, self.config.display)
        self.validator = ConflictValidator(self.timetable_id, self.grid, conflicts)
        self.commit = CommitManager(
            self.store, schedules, self.validator,
            notifications=self.notifications,
            generations=self.generations,
            token=self.token,
        )
        self.controller = InteractionController(self.grid, self.store, self.commit)

    async def __aenter__(self) -> "EditorSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # ─── Laden ───

    async def load(self) -> bool:
        """Lädt Termine und Einstellungen; True, wenn beides geklappt hat."""
        entries_ok = await self.reload_entries()
        settings_ok = await self.load_settings()
        return entries_ok and settings_ok

    async def load_settings(self) -> bool:
        try:
            settings = await self.settings_provider.get_settings(self.timetable_id)
        except ServiceError as e:
            logger.warning(f"Einstellungen für Stundenplan {self.timetable_id} nicht geladen: {e}")
            self.notifications.error("Einstellungen konnten nicht geladen werden")
            return False
        if self.token.cancelled:
            return False
        self.settings = settings
        self._apply_grid(TimeGrid.from_settings(settings, self.grid.display))
        self.validator.settings = settings
        return True

    async def reload_entries(self) -> bool:
        """Lädt die Terminliste neu; ältere Antworten überschreiben nie neuere."""
        ticket = self.generations.issue(ENTRIES_KEY, self.token)
        try:
            entries = await self.schedules.list_entries({"timetable": self.timetable_id})
        except ServiceError as e:
            logger.warning(f"Termine für Stundenplan {self.timetable_id} nicht geladen: {e}")
            if not ticket.is_stale:
                self.notifications.error("Termine konnten nicht geladen werden")
            return False
        if ticket.is_stale:
            logger.debug("Veraltete Terminliste verworfen")
            return False
        self.store.replace(entries)
        return True

    def _apply_grid(self, grid: TimeGrid) -> None:
        self.grid = grid
        self.validator.grid = grid
        self.controller.grid = grid

    # ─── Darstellung ───

    def resize(self, available_width: float) -> int:
        """Passt die Spaltenbreite an die verfügbare Breite der Oberfläche an."""
        width = TimeGrid.column_width_for(available_width, len(self.grid.days))
        display = self.grid.display.model_copy(update={"column_width": width})
        self._apply_grid(dataclasses.replace(self.grid, display=display))
        return width

    def set_stacking_mode(self, mode: StackingMode) -> None:
        self.stacking_mode = StackingMode(mode)

    @property
    def visible_entries(self) -> list[ScheduleEntry]:
        return filter_entries(self.store.entries, self.entry_filter)

    def layout(self) -> list[DayColumn]:
        """Tagesspalten der gefilterten Termine mit Lanes und Geometrie."""
        return layout_day_columns(
            self.visible_entries, self.grid, self.stacking_mode, self.conflict_ids
        )

    def preview_geometry(self) -> Optional[Geometry]:
        preview = self.controller.preview
        if preview is None:
            return None
        return preview_geometry(preview, self.grid)

    # ─── Filter und Kennzahlen ───

    def set_filter(
        self,
        search: Optional[str] = None,
        room: Optional[int] = None,
        class_group: Optional[int] = None,
    ) -> None:
        self.entry_filter = EntryFilter(search=search or "", room=room, class_group=class_group)

    def clear_filters(self) -> None:
        self.entry_filter = EntryFilter()

    def stats(self) -> ScheduleStats:
        return ScheduleStats.from_entries(self.visible_entries)

    # ─── PendingSave und Konflikte ───

    @property
    def pending_save(self) -> Optional[PendingSave]:
        return self.commit.pending_save

    @property
    def notification(self) -> Optional[Notification]:
        return self.notifications.current

    def preview_conflict(self, conflict: ConflictEntry) -> Optional[Preview]:
        """Zeigt die Lage eines Server-Konflikts als Vorschau und hebt ihn hervor."""
        self.conflict_ids.add(conflict.id)
        day_index = self.grid.day_index(conflict.day_of_week)
        if day_index is None:
            return None
        preview = Preview(day_index=day_index, start_minute=conflict.start_time,
                          duration_minutes=self.grid.duration)
        self.controller.show_preview(preview)
        return self.controller.preview

    def dismiss(self) -> None:
        """Verwirft PendingSave samt Konflikt-Hervorhebung und -Vorschau."""
        self.commit.dismiss()
        self.conflict_ids.clear()
        self.controller.show_preview(None)

    # ─── Ende ───

    def close(self) -> None:
        """Ab jetzt werden Antworten offener Anfragen verworfen."""
        self.controller.cancel_drag()
        self.token.cancel()
