"""Raster-Modul: Zeitraster, Lane-Zuweisung und Platzierung (reine Rechenlogik)."""

from .time_grid import TimeGrid, GridSlot, round_half_up
from .lanes import Interval, LaneLayout, assign_lanes, compute_lanes
from .placement import compute_geometry, preview_geometry, layout_day_columns

__all__ = [
    "TimeGrid",
    "GridSlot",
    "round_half_up",
    "Interval",
    "LaneLayout",
    "assign_lanes",
    "compute_lanes",
    "compute_geometry",
    "preview_geometry",
    "layout_day_columns",
]
