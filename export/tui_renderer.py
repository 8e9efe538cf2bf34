"""Gemeinsamer Renderer für die Terminal-Anzeige des Wochenrasters.

Wird von cmd_show / cmd_layout (Rich) und cmd_browse (Textual) verwendet.
Liest nur fertige Tagesspalten; gerechnet wird in grid/.
"""

from typing import TYPE_CHECKING, Optional

from config.defaults import DAY_LABELS
from models.clock import format_time

if TYPE_CHECKING:
    from grid.time_grid import TimeGrid
    from models.placement import DayColumn, EntryPlacement, Preview


def day_headers(grid: "TimeGrid") -> list[str]:
    """Spaltenköpfe ("Mo", "Di", ...) für die aktiven Tage."""
    return [DAY_LABELS.get(day, day[:2].title()) for day in grid.days]


def placement_label(p: "EntryPlacement") -> str:
    """Zellentext eines Termins, z.B. "! 5a ·1 (fix)"."""
    text = p.label
    if p.lane_count > 1:
        text = f"{text} ·{p.lane}"
    if p.is_locked:
        text = f"{text} (fix)"
    if p.is_conflict:
        text = f"! {text}"
    return text


def render_week_rows(
    columns: list["DayColumn"],
    grid: "TimeGrid",
    preview: Optional["Preview"] = None,
) -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [Uhrzeit, Mo, Di, ...]. Ein Termin erscheint in jeder
    Slot-Zeile, die er überdeckt; mehrere Lanes stehen untereinander.
    """
    rows: list[list[str]] = []
    for slot in grid.slots():
        slot_end = slot.minute + grid.slot_minutes
        cells = [slot.label]
        for column in columns:
            lines = [
                placement_label(p)
                for p in sorted(column.placements, key=lambda p: p.lane)
                if p.start_minute < slot_end and p.end_minute > slot.minute
            ]
            if (
                preview is not None
                and preview.day_index == column.day_index
                and preview.start_minute < slot_end
                and preview.end_minute > slot.minute
            ):
                lines.append("▶ Vorschau")
            cells.append("\n".join(lines) if lines else "—")
        rows.append(cells)
    return rows


LAYOUT_HEADERS = [
    "ID", "Tag", "Zeit", "Lane", "top", "height", "left", "width", "z",
]


def render_layout_rows(columns: list["DayColumn"]) -> list[list[str]]:
    """Eine Zeile pro Termin mit Lane und Pixel-Geometrie."""
    rows: list[list[str]] = []
    for column in columns:
        for p in sorted(column.placements, key=lambda p: (p.start_minute, p.lane)):
            g = p.geometry
            rows.append([
                str(p.entry_id),
                DAY_LABELS.get(column.day, column.day),
                f"{format_time(p.start_minute)}–{format_time(p.end_minute)}",
                f"{p.lane}/{p.lane_count}",
                str(g.top),
                str(g.height),
                str(g.left),
                str(g.width),
                str(g.z_index),
            ])
    return rows


def layout_as_dict(columns: list["DayColumn"]) -> list[dict]:
    """JSON-taugliche Form der Tagesspalten (für `layout --json`)."""
    return [column.model_dump(mode="json") for column in columns]
