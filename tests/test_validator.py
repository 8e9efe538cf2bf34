"""Tests für die Konfliktprüfung (lokal und Backend)."""

import pytest

from analysis.conflict_validator import ConflictValidator, overlaps
from data.memory_backend import InMemoryBackend
from grid.time_grid import TimeGrid
from models.placement import Candidate, ViolationReport
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _entry(entry_id: int, day: str, start: str, group: int = 1, **kw) -> ScheduleEntry:
    return ScheduleEntry(id=entry_id, day_of_week=day, start_time=start,
                         class_group=group, timetable=1, **kw)


def _make_validator(
    entries: list[ScheduleEntry],
    settings: TimetableSettings = None,
    grid_settings: TimetableSettings = None,
    blocked: list[ConflictEntry] = None,
) -> tuple[ConflictValidator, InMemoryBackend]:
    """Validator mit InMemoryBackend als Konfliktprüfung."""
    grid = TimeGrid.from_settings(grid_settings or settings)
    backend = InMemoryBackend(timetable_id=1, settings=settings,
                              entries=entries, blocked=blocked)
    return ConflictValidator(1, grid, backend, settings), backend


def _cand(entry_id: int, day: str, hh_mm: str) -> Candidate:
    hh, mm = hh_mm.split(":")
    return Candidate(id=entry_id, day_of_week=day, start_time=int(hh) * 60 + int(mm))


# ─── INTERVALLE ───────────────────────────────────────────────────────────────

class TestOverlaps:
    def test_half_open(self):
        """Ende == Beginn ist keine Überschneidung."""
        assert overlaps(540, 600, 570, 630)
        assert not overlaps(540, 600, 600, 660)
        assert not overlaps(600, 660, 540, 600)

    def test_containment(self):
        assert overlaps(540, 660, 570, 600)
        assert overlaps(570, 600, 540, 660)


# ─── LOKALE PRÜFUNG ───────────────────────────────────────────────────────────

class TestLocalOverlap:
    def test_exact_interval_of_other_entry(self):
        """Kandidat genau auf dem Intervall eines anderen Termins → Verletzung."""
        a = _entry(1, "monday", "09:00", group=1)
        b = _entry(2, "monday", "10:00", group=2)
        validator, _ = _make_validator([a, b])
        violations = validator.check_local(_cand(1, "monday", "10:00"), [a, b])
        assert violations == ["Der Termin überschneidet sich mit einem bestehenden Termin."]

    def test_unchanged_position_no_self_overlap(self):
        """Der Termin selbst wird nie als Überschneidung gezählt."""
        a = _entry(1, "monday", "09:00")
        b = _entry(2, "monday", "10:00")
        validator, _ = _make_validator([a, b])
        assert validator.check_local(_cand(1, "monday", "09:00"), [a, b]) == []

    def test_adjacent_and_other_day(self):
        """Anschließend an einen Termin oder an einem anderen Tag → frei."""
        a = _entry(1, "monday", "09:00")
        b = _entry(2, "monday", "10:00")
        validator, _ = _make_validator([a, b])
        assert not validator.has_local_overlap(_cand(1, "monday", "11:00"), [a, b])
        assert not validator.has_local_overlap(_cand(1, "tuesday", "10:00"), [a, b])


class TestConstraints:
    def test_min_break_violated(self):
        """Mindestpause 10 min: 5 min Abstand → Verletzung."""
        settings = TimetableSettings(slot_duration_minutes=5, preferred_class_duration=60,
                                     min_break_between_classes=10)
        x = _entry(1, "monday", "09:00", group=1)
        y = _entry(3, "monday", "11:00", group=1)
        validator, _ = _make_validator([x, y], settings)
        violations = validator.check_constraints(_cand(3, "monday", "10:05"), [x, y])
        assert len(violations) == 1
        assert "beträgt 5 min" in violations[0]
        assert "Minimum von 10 min" in violations[0]

    def test_min_break_exactly_met(self):
        """Genau 10 min Abstand → keine Verletzung."""
        settings = TimetableSettings(slot_duration_minutes=5, preferred_class_duration=60,
                                     min_break_between_classes=10)
        x = _entry(1, "monday", "09:00", group=1)
        y = _entry(3, "monday", "11:00", group=1)
        validator, _ = _make_validator([x, y], settings)
        assert validator.check_constraints(_cand(3, "monday", "10:10"), [x, y]) == []

    def test_min_break_ignores_other_groups(self):
        settings = TimetableSettings(slot_duration_minutes=5, preferred_class_duration=60,
                                     min_break_between_classes=10)
        x = _entry(1, "monday", "09:00", group=2)
        y = _entry(3, "monday", "11:00", group=1)
        validator, _ = _make_validator([x, y], settings)
        assert validator.check_constraints(_cand(3, "monday", "10:05"), [x, y]) == []

    def test_max_consecutive_exceeded(self):
        """Grenze 2: dritter direkt anschließender Termin → Verletzung."""
        settings = TimetableSettings(max_consecutive_classes=2)
        entries = [
            _entry(1, "monday", "08:00"),
            _entry(2, "monday", "09:00"),
            _entry(3, "monday", "14:00"),
        ]
        validator, _ = _make_validator(entries, settings)
        violations = validator.check_constraints(_cand(3, "monday", "10:00"), entries)
        assert violations == [
            "Die Änderung ergäbe 3 aufeinanderfolgende Termine für die Gruppe (Grenze: 2)."
        ]

    def test_max_consecutive_with_gap(self):
        """Lücke größer als die Mindestpause unterbricht die Folge."""
        settings = TimetableSettings(max_consecutive_classes=2)
        entries = [
            _entry(1, "monday", "08:00"),
            _entry(2, "monday", "09:00"),
            _entry(3, "monday", "14:00"),
        ]
        validator, _ = _make_validator(entries, settings)
        assert validator.check_constraints(_cand(3, "monday", "11:00"), entries) == []

    def test_duration_mismatch(self):
        """Raster-Dauer ≠ bevorzugte Dauer → Hinweis mit beiden Werten."""
        validator, _ = _make_validator(
            [], settings=TimetableSettings(preferred_class_duration=45),
            grid_settings=TimetableSettings(slot_duration_minutes=60),
        )
        violations = validator.check_constraints(_cand(1, "monday", "09:00"), [])
        assert violations == [
            "Dauer 60 min entspricht nicht der bevorzugten Termindauer von 45 min."
        ]

    def test_no_settings_no_heuristics(self):
        """Ohne Einstellungen nur die Überschneidungsprüfung."""
        entries = [_entry(1, "monday", "08:00"), _entry(2, "monday", "09:00"),
                   _entry(3, "monday", "14:00")]
        validator, _ = _make_validator(entries, settings=None)
        assert validator.check_constraints(_cand(3, "monday", "10:00"), entries) == []


# ─── SERVER-PRÜFUNG ───────────────────────────────────────────────────────────

class TestServerCheck:
    @pytest.mark.asyncio
    async def test_request_parameters(self):
        """Tag als Index, Zeiten als HH:MM, eigener Termin ausgeschlossen."""
        a = _entry(1, "monday", "09:00")
        validator, backend = _make_validator([a], TimetableSettings())
        await validator.check_server(_cand(1, "tuesday", "10:00"))
        assert backend.conflict_calls[-1] == {
            "timetable": 1, "day": 1, "start_time": "10:00",
            "end_time": "11:00", "exclude_id": 1,
        }

    @pytest.mark.asyncio
    async def test_blocked_only_visible_to_server(self):
        """Raumsperre außerhalb des Plans → nur der Server meldet den Konflikt."""
        blocked = ConflictEntry(id=900, day_of_week="wednesday", start_time="12:00",
                                end_time="13:00", note="Raumsperrung")
        a = _entry(1, "monday", "09:00")
        validator, _ = _make_validator([a], TimetableSettings(), blocked=[blocked])
        report = await validator.validate(_cand(1, "wednesday", "12:00"), [a])
        assert report.local_violations == []
        assert [c.id for c in report.server_conflicts] == [900]
        assert not report.is_clean

    @pytest.mark.asyncio
    async def test_server_failure_falls_back_to_local(self):
        """Fehler der Konfliktprüfung → Warnung, lokales Ergebnis zählt."""
        a = _entry(1, "monday", "09:00", group=1)
        b = _entry(2, "monday", "10:00", group=2)
        validator, backend = _make_validator([a, b], TimetableSettings())
        backend.fail_conflict_checks = True
        report = await validator.validate(_cand(1, "monday", "10:00"), [a, b])
        assert len(report.local_violations) == 1
        assert report.server_conflicts == []

    @pytest.mark.asyncio
    async def test_day_outside_grid_skips_server(self):
        validator, backend = _make_validator([], TimetableSettings())
        assert await validator.check_server(_cand(1, "sunday", "10:00")) == []
        assert backend.conflict_calls == []

    @pytest.mark.asyncio
    async def test_validate_merges_both(self):
        """Lokale Verletzung und Server-Konflikt landen im selben Bericht."""
        a = _entry(1, "monday", "09:00", group=1)
        b = _entry(2, "monday", "10:00", group=2)
        validator, _ = _make_validator([a, b], TimetableSettings())
        report = await validator.validate(_cand(1, "monday", "10:00"), [a, b])
        assert len(report.local_violations) == 1
        assert [c.id for c in report.server_conflicts] == [2]
        assert "Server meldet 1 Konflikt(e)." in report.summary()

    @pytest.mark.asyncio
    async def test_clean_move(self):
        a = _entry(1, "monday", "09:00")
        validator, _ = _make_validator([a], TimetableSettings())
        report = await validator.validate(_cand(1, "friday", "14:00"), [a])
        assert report.is_clean
        assert report.summary() == "Keine Verletzungen."


class TestViolationReport:
    def test_print_rich_runs(self, capsys):
        """Rich-Ausgabe mit Server-Konflikten läuft ohne Fehler."""
        report = ViolationReport(
            local_violations=["Der Termin überschneidet sich mit einem bestehenden Termin."],
            server_conflicts=[ConflictEntry(id=2, day_of_week="monday", start_time="10:00",
                                            class_group_name="5a", room_name="R101")],
        )
        report.print_rich()
        out = capsys.readouterr().out
        assert "Konfliktprüfung" in out
        assert "R101" in out
