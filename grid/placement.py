"""Platzierungs-Rechner: (Beginn, Ende, Lane) → Pixel-Rechteck.

Reine Funktionen ohne Seiteneffekte; die Oberfläche liest nur das Ergebnis.
"""

import logging
import math
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from config.schema import StackingMode
from grid.lanes import compute_lanes
from grid.time_grid import TimeGrid, round_half_up
from models.placement import DayColumn, EntryPlacement, Geometry, Preview
from models.schedule_entry import ScheduleEntry

logger = logging.getLogger(__name__)

BASE_Z_INDEX = 20
PREVIEW_Z_INDEX = 999


def compute_geometry(
    start: int,
    end: int,
    lane: int,
    lane_count: int,
    grid: TimeGrid,
    stacking_mode: Optional[StackingMode] = None,
) -> Geometry:
    """Berechnet das Rechteck eines Termins innerhalb seiner Tagesspalte.

    top    = (start − Fensterbeginn) × px/min + lane × Lane-Versatz + padding
    height = Dauer × px/min − 2 × padding, mindestens min_height_px

    Im Modus "columns" teilen sich die Lanes die Spaltenbreite gleichmäßig,
    im Modus "vertical" nutzen alle die volle Breite und höhere Lanes liegen
    darüber (z-index).
    """
    display = grid.display
    mode = stacking_mode or display.stacking_mode
    ppm = grid.pixels_per_minute
    padding = display.padding_px

    rel_start = max(0, start - grid.window_start)
    rel_end = max(rel_start + 1, end - grid.window_start)

    top = max(0, round_half_up(rel_start * ppm + lane * grid.stack_offset_px + padding))
    height = max(display.min_height_px,
                 round_half_up((rel_end - rel_start) * ppm - padding * 2))
    z_index = BASE_Z_INDEX + lane

    column_width = display.column_width
    if mode == StackingMode.COLUMNS:
        lanes = max(1, lane_count)
        gutter = display.columns_gutter_px
        width = max(display.min_width_px, math.floor((column_width - gutter) / lanes))
        left = round_half_up(lane * (column_width / lanes) + gutter)
    else:
        left = padding
        width = max(display.min_width_px, round_half_up(column_width - padding * 2))

    return Geometry(top=top, height=height, left=left, width=width, z_index=z_index)


def preview_geometry(preview: Preview, grid: TimeGrid) -> Geometry:
    """Rechteck der Vorschau: volle Breite, ohne Lane-Versatz, ganz oben."""
    geometry = compute_geometry(
        preview.start_minute,
        preview.start_minute + (preview.duration_minutes or grid.duration),
        lane=0,
        lane_count=1,
        grid=grid,
        stacking_mode=StackingMode.VERTICAL,
    )
    return geometry.model_copy(update={"z_index": PREVIEW_Z_INDEX})


def layout_day_columns(
    entries: Sequence[ScheduleEntry],
    grid: TimeGrid,
    stacking_mode: Optional[StackingMode] = None,
    conflict_ids: Iterable[int] = (),
) -> list[DayColumn]:
    """Gruppiert Termine nach Tag, vergibt Lanes und berechnet die Geometrie.

    Termine an Tagen, die im Raster nicht aktiv sind, werden übersprungen.
    """
    highlighted = set(conflict_ids)
    by_day: dict[str, list[ScheduleEntry]] = defaultdict(list)
    for e in entries:
        if grid.day_index(e.day_of_week) is None:
            logger.debug(f"Termin {e.id}: Tag '{e.day_of_week}' nicht im Raster")
            continue
        by_day[e.day_of_week].append(e)

    columns: list[DayColumn] = []
    for day_index, day in enumerate(grid.days):
        day_entries = by_day.get(day, [])
        entry_map = {e.id: e for e in day_entries}
        layout = compute_lanes(day_entries, grid.duration)
        placements = []
        for item in layout.items:
            entry = entry_map[item.key]
            placements.append(EntryPlacement(
                entry_id=entry.id,
                day_index=day_index,
                lane=item.lane,
                lane_count=layout.lane_count,
                geometry=compute_geometry(
                    item.start, item.end, item.lane, layout.lane_count,
                    grid, stacking_mode,
                ),
                is_locked=entry.is_locked,
                is_conflict=entry.id in highlighted,
                start_minute=item.start,
                end_minute=item.end,
                label=entry.class_group_name or f"#{entry.id}",
            ))
        columns.append(DayColumn(
            day=day,
            day_index=day_index,
            lane_count=layout.lane_count,
            placements=placements,
        ))
    return columns
