"""Interaktions-Steuerung: Ziehen per Zeiger und Verschieben per Tastatur.

Zustände der Ziehgeste (genau einer gleichzeitig):
    Idle → Dragging{id} → Committing{id} → Idle

Die Auswahl für Tastatur-Nudges ist davon unabhängig (höchstens ein Termin).
Zeigerbewegungen rechnen nur Geometrie und sind synchron; erst das Loslassen
und die Nudges laufen asynchron über den CommitManager.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from editor.commit import CommitManager, CommitResult, CommitStatus
from editor.store import ScheduleStore
from grid.time_grid import TimeGrid
from models.placement import Candidate, Preview

logger = logging.getLogger(__name__)


class InteractionError(Exception):
    """Fehlbedienung durch die Oberfläche (z.B. unbekannte Termin-ID)."""


# ─── Zustände ───

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    entry_id: int


@dataclass(frozen=True)
class Committing:
    entry_id: int


DragState = Union[Idle, Dragging, Committing]


# ─── Trefferprüfung ───

@dataclass(frozen=True)
class ColumnBounds:
    """Lage der Tagesspalten in Oberflächen-Koordinaten.

    Spalte i reicht von left + i × column_width bis left + (i+1) × column_width;
    an gemeinsamen Kanten gewinnt die linke Spalte.
    """

    left: float
    top: float
    column_width: float
    height: float
    day_count: int

    @classmethod
    def for_grid(cls, grid: TimeGrid, left: float = 0.0, top: float = 0.0) -> "ColumnBounds":
        return cls(
            left=left,
            top=top,
            column_width=grid.display.column_width,
            height=grid.total_height,
            day_count=len(grid.days),
        )

    def hit(self, x: float, y: float) -> Optional[tuple[int, float]]:
        """(Tagesindex, y relativ zur Spaltenoberkante) oder None außerhalb."""
        if not self.top <= y <= self.top + self.height:
            return None
        for i in range(self.day_count):
            col_left = self.left + i * self.column_width
            if col_left <= x <= col_left + self.column_width:
                return i, y - self.top
        return None


KEY_DELTAS: dict[str, tuple[int, int]] = {
    # Taste → (Slots, Tage)
    "ArrowUp": (-1, 0),
    "ArrowDown": (1, 0),
    "ArrowLeft": (0, -1),
    "ArrowRight": (0, 1),
}


class InteractionController:
    """Übersetzt Gesten in Kandidaten und reicht sie an den CommitManager weiter.

    Eine Oberfläche, die nicht speichern kann, baut keinen Controller.
    """

    def __init__(
        self,
        grid: TimeGrid,
        store: ScheduleStore,
        commit: CommitManager,
        on_preview: Optional[Callable[[Optional[Preview]], None]] = None,
    ) -> None:
        self.grid = grid
        self.store = store
        self.commit = commit
        self.on_preview = on_preview
        self.state: DragState = Idle()
        self.selected_id: Optional[int] = None
        self._preview: Optional[Preview] = None
        self._moved = False

    # ─── Zustand ───

    @property
    def preview(self) -> Optional[Preview]:
        return self._preview

    @property
    def dragging_id(self) -> Optional[int]:
        return self.state.entry_id if isinstance(self.state, Dragging) else None

    def _set_preview(self, preview: Optional[Preview]) -> None:
        self._preview = preview
        if self.on_preview is not None:
            self.on_preview(preview)

    def show_preview(self, preview: Optional[Preview]) -> None:
        """Vorschau außerhalb einer Geste setzen (z.B. Konflikt-Vorschau)."""
        if isinstance(self.state, Idle):
            self._set_preview(preview)

    def _reset(self) -> None:
        self.state = Idle()
        self._moved = False
        self._set_preview(None)

    # ─── Auswahl ───

    def select(self, entry_id: Optional[int]) -> None:
        """Wählt einen Termin für Tastatur-Nudges aus (None hebt die Auswahl auf)."""
        if entry_id is not None and entry_id not in self.store:
            raise InteractionError(f"Termin {entry_id} ist nicht geladen")
        self.selected_id = entry_id

    # ─── Ziehen (Hook-Ebene) ───

    def drag_start(self, entry_id: int) -> bool:
        """Idle → Dragging. Gesperrte Termine und erneuter Start werden abgelehnt."""
        entry = self.store.get(entry_id)
        if entry is None:
            raise InteractionError(f"Termin {entry_id} ist nicht geladen")
        if not isinstance(self.state, Idle):
            logger.debug(f"Ziehen von #{entry_id} abgelehnt, Zustand {self.state}")
            return False
        if entry.is_locked:
            logger.debug(f"#{entry_id} ist gesperrt und kann nicht gezogen werden")
            return False
        if self.commit.is_in_flight(entry_id):
            logger.debug(f"#{entry_id} wird gerade gespeichert")
            return False
        self.state = Dragging(entry_id)
        self._moved = False
        self._set_preview(None)
        return True

    def drag_preview(self, preview: Preview) -> None:
        """Übernimmt eine Vorschau der Oberfläche; der Beginn wird aufs Raster gesetzt."""
        if not isinstance(self.state, Dragging):
            return
        start = self.grid.snap_and_clamp(preview.start_minute)
        if start != preview.start_minute:
            preview = preview.model_copy(update={"start_minute": start})
        self._moved = True
        self._set_preview(preview)

    async def drag_end(self, candidate: Optional[Candidate] = None) -> CommitResult:
        """Dragging → Committing → Idle.

        Ohne expliziten Kandidaten wird die letzte Vorschau verwendet. Ohne
        Bewegung ist die Geste wirkungslos und der Validator wird nicht befragt.
        """
        if not isinstance(self.state, Dragging):
            raise InteractionError(f"drag_end ohne aktive Ziehgeste ({self.state})")
        entry_id = self.state.entry_id
        if candidate is None:
            candidate = self._candidate_from_preview(entry_id)
        if candidate is None or self._is_unchanged(candidate):
            self._reset()
            return CommitResult(status=CommitStatus.NOOP, entry_id=entry_id,
                                entry=self.store.get(entry_id))

        self.state = Committing(entry_id)
        try:
            result = await self.commit.submit(candidate)
        finally:
            self._reset()
        if result.status == CommitStatus.COMMITTED and self.selected_id == entry_id:
            self.selected_id = None
        return result

    def cancel_drag(self) -> None:
        """Bricht eine laufende Ziehgeste ohne Speichern ab."""
        if isinstance(self.state, Dragging):
            self._reset()

    def _candidate_from_preview(self, entry_id: int) -> Optional[Candidate]:
        if self._preview is None:
            return None
        return Candidate(
            id=entry_id,
            day_of_week=self.grid.day_at(self._preview.day_index),
            start_time=self._preview.start_minute,
        )

    def _is_unchanged(self, candidate: Candidate) -> bool:
        entry = self.store.get(candidate.id)
        return entry is not None and (
            (entry.day_of_week, entry.start_time) == (candidate.day_of_week, candidate.start_time)
        )

    # ─── Ziehen (Zeiger-Ebene) ───

    def pointer_down(self, entry_id: int) -> bool:
        return self.drag_start(entry_id)

    def pointer_move(self, x: float, y: float, bounds: ColumnBounds) -> Optional[Preview]:
        """Rastert die Zeigerposition und veröffentlicht die Vorschau.

        Außerhalb aller Spalten bleibt die letzte Vorschau stehen.
        """
        if not isinstance(self.state, Dragging):
            return None
        hit = bounds.hit(x, y)
        if hit is None:
            return self._preview
        day_index, rel_y = hit
        start = self.grid.snap_and_clamp(self.grid.minute_from_offset(rel_y))
        preview = Preview(day_index=day_index, start_minute=start,
                          duration_minutes=self.grid.duration)
        self._moved = True
        self._set_preview(preview)
        return preview

    async def pointer_up(self, x: float, y: float, bounds: ColumnBounds) -> CommitResult:
        """Loslassen: ohne vorherige Bewegung oder außerhalb der Spalten wirkungslos."""
        if not isinstance(self.state, Dragging):
            raise InteractionError(f"pointer_up ohne aktive Ziehgeste ({self.state})")
        entry_id = self.state.entry_id
        if not self._moved or bounds.hit(x, y) is None:
            self._reset()
            return CommitResult(status=CommitStatus.NOOP, entry_id=entry_id,
                                entry=self.store.get(entry_id))
        self.pointer_move(x, y, bounds)
        return await self.drag_end()

    # ─── Tastatur ───

    async def nudge(self, entry_id: int, delta_minutes: int, delta_days: int = 0) -> CommitResult:
        """Verschiebt einen Termin um Minuten und/oder Tage (am Rand begrenzt)."""
        entry = self.store.get(entry_id)
        if entry is None:
            raise InteractionError(f"Termin {entry_id} ist nicht geladen")
        if entry.is_locked:
            logger.debug(f"#{entry_id} ist gesperrt, Nudge abgelehnt")
            return CommitResult(status=CommitStatus.REJECTED, entry_id=entry_id,
                                entry=entry, message="Termin ist gesperrt")
        day_index = self.grid.day_index(entry.day_of_week)
        if day_index is None:
            logger.warning(f"#{entry_id}: Tag '{entry.day_of_week}' nicht im Raster")
            return CommitResult(status=CommitStatus.REJECTED, entry_id=entry_id,
                                entry=entry, message="Tag nicht im Raster")

        candidate = Candidate(
            id=entry_id,
            day_of_week=self.grid.day_at(day_index + delta_days),
            start_time=self.grid.snap_and_clamp(entry.start_time + delta_minutes),
        )
        result = await self.commit.submit(candidate)
        if result.status == CommitStatus.COMMITTED:
            self.show_preview(None)
            if self.selected_id == entry_id:
                self.selected_id = None
        return result

    async def key_press(self, key: str) -> Optional[CommitResult]:
        """Pfeiltasten verschieben den ausgewählten Termin; andere Tasten werden ignoriert."""
        if self.selected_id is None or key not in KEY_DELTAS:
            return None
        slots, days = KEY_DELTAS[key]
        return await self.nudge(self.selected_id, slots * self.grid.slot_minutes, days)
