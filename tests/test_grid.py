"""Tests für Zeitraster, Lane-Zuweisung und Platzierungs-Rechner."""

import random

import pytest

from config.defaults import default_display
from config.schema import StackingMode
from grid.lanes import Interval, assign_lanes, compute_lanes
from grid.placement import (
    BASE_Z_INDEX,
    PREVIEW_Z_INDEX,
    compute_geometry,
    layout_day_columns,
    preview_geometry,
)
from grid.time_grid import TimeGrid, round_half_up
from models.placement import Preview
from models.schedule_entry import ScheduleEntry
from models.timetable_settings import TimetableSettings


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _grid(slot: int = 60, duration: int = None, start: int = 8, end: int = 17,
          mode: StackingMode = StackingMode.VERTICAL) -> TimeGrid:
    settings = TimetableSettings(
        slot_duration_minutes=slot,
        preferred_class_duration=duration,
        start_hour=start,
        end_hour=end,
    )
    display = default_display().model_copy(update={"stacking_mode": mode})
    return TimeGrid.from_settings(settings, display)


def _entry(entry_id: int, day: str, start: str, group: int = 1, **kw) -> ScheduleEntry:
    return ScheduleEntry(id=entry_id, day_of_week=day, start_time=start,
                         class_group=group, **kw)


# ─── ZEITRASTER ───────────────────────────────────────────────────────────────

class TestTimeGrid:
    def test_snap_rounds_to_nearest(self):
        """15-Minuten-Raster: 10:07 → 10:00, 10:08 → 10:15 (nicht abrunden)."""
        grid = _grid(slot=15)
        assert grid.snap(607) == 600
        assert grid.snap(608) == 615

    def test_snap_half_rounds_up(self):
        """Genau in der Mitte wird aufgerundet (kein Banker's Rounding)."""
        grid = _grid(slot=10)
        assert grid.snap(485) == 490
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_snap_relative_to_window_start(self):
        """Raster beginnt bei start_hour, nicht bei Mitternacht."""
        grid = TimeGrid.from_settings(TimetableSettings(
            slot_duration_minutes=45, start_hour=8, end_hour=17,
        ))
        assert grid.snap(480 + 45 + 10) == 525
        assert grid.is_on_grid(570)
        assert not grid.is_on_grid(540)

    def test_latest_start_keeps_entry_in_window(self):
        """Spätester Beginn: Termin endet spätestens zum Fensterende."""
        grid = _grid(slot=30, duration=60)
        assert grid.latest_start == 960
        assert grid.clamp_start(1000) == 960
        assert grid.clamp_start(400) == 480
        assert grid.snap_and_clamp(2000) == 960

    def test_slot_table(self):
        """08–17 Uhr bei 60 min → 9 Slots mit HH:MM-Beschriftung."""
        grid = _grid()
        slots = grid.slots()
        assert grid.slot_count == 9
        assert [s.label for s in slots][:2] == ["08:00", "09:00"]
        assert slots[-1].label == "16:00"
        assert slots[3].index == 3

    def test_total_height(self):
        grid = _grid()
        assert grid.total_height == 540
        tiny = TimeGrid.from_settings(TimetableSettings(start_hour=8, end_hour=9),
                                      default_display().model_copy(update={"pixels_per_hour": 12}))
        assert tiny.total_height == 48

    def test_minute_from_offset(self):
        """Pixel-Abstand → Minute seit Mitternacht (1 px = 1 min)."""
        grid = _grid()
        assert grid.minute_from_offset(127) == 607
        assert grid.minute_from_offset(-20) == 480
        assert grid.y_from_minute(540) == 60

    def test_day_lookup_and_clamping(self):
        """Tage außerhalb des Rasters → None; Index wird begrenzt, kein Umlauf."""
        grid = _grid()
        assert grid.day_index("wednesday") == 2
        assert grid.day_index("saturday") is None
        assert grid.day_at(-1) == "monday"
        assert grid.day_at(9) == "friday"

    def test_stack_offset(self):
        """Lane-Versatz: min(16, 0.4 × Slot-Höhe)."""
        assert _grid(slot=60).stack_offset_px == 16
        assert _grid(slot=15).stack_offset_px == pytest.approx(6.0)

    def test_column_width_for(self):
        """Spaltenbreite aus Fensterbreite abzüglich 80 px Zeitleiste."""
        assert TimeGrid.column_width_for(1000, 5) == 184
        assert TimeGrid.column_width_for(100, 5) == 100

    def test_defaults_without_settings(self):
        grid = TimeGrid.from_settings(None)
        assert grid.slot_minutes == 60
        assert grid.duration == 60
        assert grid.days == ("monday", "tuesday", "wednesday", "thursday", "friday")


# ─── LANES ────────────────────────────────────────────────────────────────────

class TestLanes:
    def test_overlap_gets_second_lane(self):
        """09–10 und 09:30–10:30 überlappen → Lanes 0 und 1; 10–11 → Lane 0."""
        layout = assign_lanes([
            Interval("a", 540, 600),
            Interval("b", 570, 630),
            Interval("c", 600, 660),
        ])
        assert layout.as_dict() == {"a": 0, "b": 1, "c": 0}
        assert layout.lane_count == 2

    def test_touching_intervals_share_lane(self):
        """Halboffen: Ende == Beginn ist keine Überschneidung."""
        layout = assign_lanes([Interval(1, 540, 600), Interval(2, 600, 660)])
        assert layout.as_dict() == {1: 0, 2: 0}
        assert layout.lane_count == 1

    def test_longer_first_on_equal_start(self):
        """Gleicher Beginn: längerer Termin bekommt die niedrigere Lane."""
        layout = assign_lanes([Interval("kurz", 540, 600), Interval("lang", 540, 660)])
        assert layout.lane_of("lang") == 0
        assert layout.lane_of("kurz") == 1

    def test_identical_intervals_stable(self):
        """Identische Intervalle: verschiedene Lanes in Eingabereihenfolge."""
        layout = assign_lanes([Interval("x", 540, 600), Interval("y", 540, 600),
                               Interval("z", 540, 600)])
        assert [layout.lane_of(k) for k in "xyz"] == [0, 1, 2]
        assert layout.lane_count == 3

    def test_zero_length_sorted_as_one_minute(self):
        """Länge 0 zählt als 1 Minute und wird nach längeren einsortiert."""
        layout = assign_lanes([Interval("null", 540, 540), Interval("voll", 540, 600)])
        assert layout.lane_of("voll") == 0
        assert layout.lane_of("null") == 1

    def test_empty_day_has_one_lane(self):
        layout = assign_lanes([])
        assert layout.items == []
        assert layout.lane_count == 1

    def test_lane_of_unknown_raises(self):
        with pytest.raises(KeyError):
            assign_lanes([Interval(1, 0, 10)]).lane_of(2)

    def test_random_days_keep_invariants(self):
        """Zufällige Tage: keine Überschneidung in einer Lane, Lanes lückenlos ab 0."""
        rng = random.Random(7)
        for _ in range(50):
            intervals = []
            for k in range(rng.randint(1, 12)):
                start = rng.randrange(480, 1000, 15)
                intervals.append(Interval(k, start, start + rng.choice([30, 45, 60, 90])))
            layout = assign_lanes(intervals)

            lanes = {item.lane for item in layout.items}
            assert lanes == set(range(layout.lane_count))
            for a in layout.items:
                for b in layout.items:
                    if a.key != b.key and a.lane == b.lane:
                        assert not (a.start < b.end and b.start < a.end)

    def test_compute_lanes_uses_fixed_duration(self):
        """Termindauer kommt aus den Einstellungen, nicht vom Termin."""
        entries = [_entry(1, "monday", "09:00", end_time="09:10"),
                   _entry(2, "monday", "09:30")]
        assert compute_lanes(entries, 60).as_dict() == {1: 0, 2: 1}
        assert compute_lanes(entries, 30).as_dict() == {1: 0, 2: 0}


# ─── PLATZIERUNG ──────────────────────────────────────────────────────────────

class TestPlacement:
    def test_vertical_geometry(self):
        """Modus vertical: volle Breite, Versatz pro Lane, höhere Lane oben."""
        grid = _grid()
        g0 = compute_geometry(540, 600, lane=0, lane_count=2, grid=grid)
        g1 = compute_geometry(540, 600, lane=1, lane_count=2, grid=grid)
        assert (g0.top, g0.height, g0.left, g0.width, g0.z_index) == (64, 52, 4, 142, BASE_Z_INDEX)
        assert g1.top == 80
        assert g1.width == g0.width
        assert g1.z_index == g0.z_index + 1

    def test_columns_geometry(self):
        """Modus columns: Breite wird durch die Lane-Anzahl geteilt."""
        grid = _grid(mode=StackingMode.COLUMNS)
        g0 = compute_geometry(540, 600, lane=0, lane_count=2, grid=grid)
        g1 = compute_geometry(540, 600, lane=1, lane_count=2, grid=grid)
        assert (g0.left, g0.width) == (8, 71)
        assert (g1.left, g1.width) == (83, 71)

    def test_explicit_mode_overrides_display(self):
        grid = _grid(mode=StackingMode.VERTICAL)
        g = compute_geometry(540, 600, 1, 2, grid, stacking_mode=StackingMode.COLUMNS)
        assert g.width == 71

    def test_minimum_height_and_width(self):
        """Sehr kurze Termine bleiben klickbar, schmale Spalten ≥ 40 px."""
        grid = _grid()
        g = compute_geometry(540, 541, 0, 1, grid)
        assert g.height == 8
        narrow = _grid(mode=StackingMode.COLUMNS)
        g = compute_geometry(540, 600, 5, 6, narrow)
        assert g.width == 40

    def test_preview_geometry_on_top(self):
        """Vorschau: volle Breite, kein Lane-Versatz, z-index 999."""
        grid = _grid(mode=StackingMode.COLUMNS)
        g = preview_geometry(Preview(day_index=0, start_minute=600, duration_minutes=60), grid)
        assert (g.top, g.height, g.left, g.width) == (124, 52, 4, 142)
        assert g.z_index == PREVIEW_Z_INDEX

    def test_layout_day_columns(self):
        """Gruppierung nach Tag, Lanes, Konflikt-Markierung; inaktive Tage entfallen."""
        grid = _grid()
        entries = [
            _entry(1, "monday", "09:00", class_group_name="5a"),
            _entry(2, "monday", "09:30", is_locked=True),
            _entry(3, "tuesday", "10:00"),
            _entry(4, "saturday", "10:00"),
        ]
        columns = layout_day_columns(entries, grid, conflict_ids={3})
        assert [c.day for c in columns] == list(grid.days)
        monday, tuesday = columns[0], columns[1]
        assert monday.lane_count == 2
        assert {p.entry_id: p.lane for p in monday.placements} == {1: 0, 2: 1}
        assert monday.placements[0].label == "5a"
        assert monday.placements[1].label == "#2"
        assert monday.placements[1].is_locked
        assert tuesday.placements[0].is_conflict
        assert columns[2].placements == []
        assert columns[2].lane_count == 1
        assert all(p.entry_id != 4 for c in columns for p in c.placements)
