"""Tests für das Konfigurationssystem und die Basis-Datenmodelle."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    ApiConfig,
    DisplayConfig,
    EditorConfig,
    LoggingConfig,
    StackingMode,
)
from config.defaults import (
    ALL_DAYS,
    DAY_LABELS,
    DEFAULT_ENABLED_DAYS,
    default_display,
    default_editor_config,
)
from config.manager import ConfigManager
from models.clock import format_time, parse_hour, parse_time
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_display_valid(self):
        """Default-Darstellung: 60 px/h, 150 px Spalten, vertikal gestapelt."""
        d = default_display()
        assert d.pixels_per_hour == 60
        assert d.pixels_per_minute == 1.0
        assert d.column_width == 150
        assert d.padding_px == 4
        assert d.max_stack_offset_px == 16
        assert d.stacking_mode == StackingMode.VERTICAL

    def test_default_editor_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_editor_config()
        assert config.timetable_id == 1
        assert config.notifications.auto_dismiss_seconds == 4.0
        assert config.logging.level == "WARNING"
        assert config.api.page_size == 1000

    def test_day_labels_cover_all_days(self):
        """Jeder Wochentag hat eine Kurzbezeichnung."""
        for day in ALL_DAYS:
            assert day in DAY_LABELS
        assert DEFAULT_ENABLED_DAYS == ALL_DAYS[:5]


# ─── SCHEMA-VALIDIERUNG ───────────────────────────────────────────────────────

class TestSchemaValidation:
    def test_base_url_trailing_slash_removed(self):
        """base_url wird ohne abschließenden Slash gespeichert."""
        api = ApiConfig(base_url="https://campus.example.org/")
        assert api.base_url == "https://campus.example.org"

    def test_invalid_log_level(self):
        """Unbekanntes Loglevel → ValidationError."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="LAUT")

    def test_log_level_normalized(self):
        """Loglevel wird großgeschrieben."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_pixels_per_hour_bounds(self):
        """pixels_per_hour unter 12 wird abgelehnt."""
        with pytest.raises(ValidationError):
            DisplayConfig(pixels_per_hour=5)

    def test_stacking_mode_from_string(self):
        """stacking_mode akzeptiert den String-Wert."""
        d = DisplayConfig(stacking_mode="columns")
        assert d.stacking_mode == StackingMode.COLUMNS

    def test_timetable_id_positive(self):
        """timetable_id muss ≥ 1 sein."""
        with pytest.raises(ValidationError):
            EditorConfig(timetable_id=0)


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren: vollständiger Roundtrip."""
        config = default_editor_config().model_copy(update={
            "timetable_id": 7,
            "api": ApiConfig(base_url="https://campus.example.org", token="geheim"),
        })
        mgr = ConfigManager(tmp_path / "editor_config.yaml")

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load()
        assert loaded.timetable_id == 7
        assert loaded.api.base_url == "https://campus.example.org"
        assert loaded.api.token == "geheim"
        assert loaded.display == config.display

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        """Gespeicherte YAML enthält Kopf und Abschnittskommentare."""
        mgr = ConfigManager(tmp_path / "editor_config.yaml")
        mgr.save(default_editor_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "Stundenplan-Editor" in text
        assert "Darstellung" in text
        assert "stacking_mode: vertical" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager(tmp_path / "nonexistent.yaml")
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        """first_run_check gibt False zurück wenn Config existiert."""
        mgr = ConfigManager(tmp_path / "editor_config.yaml")
        mgr.save(default_editor_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        """Ungültiger Inhalt → ValueError mit Pydantic-Fehler."""
        path = tmp_path / "editor_config.yaml"
        path.write_text("timetable_id: 0\nlogging:\n  level: LAUT\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager(path).load()


# ─── UHRZEITEN ────────────────────────────────────────────────────────────────

class TestClock:
    def test_parse_hh_mm(self):
        assert parse_time("09:30") == 570

    def test_parse_with_seconds(self):
        assert parse_time("10:05:00") == 605

    def test_parse_int_passthrough(self):
        assert parse_time(480) == 480

    def test_malformed_defaults_to_midnight(self):
        """Unlesbare Uhrzeit → 00:00 statt Ausnahme."""
        assert parse_time("kaputt") == 0
        assert parse_time("") == 0
        assert parse_time(None) == 0
        assert parse_time("10:75") == 0

    def test_format_time(self):
        assert format_time(605) == "10:05"
        assert format_time(0) == "00:00"

    def test_parse_hour(self):
        assert parse_hour("08:00", 7) == 8
        assert parse_hour(None, 17) == 17
        assert parse_hour("x", 17) == 17


# ─── MODELLE ──────────────────────────────────────────────────────────────────

class TestModels:
    def test_entry_from_backend_payload(self):
        """Backend-Termin mit "HH:MM" und Zusatzfeldern wird gelesen."""
        e = ScheduleEntry.model_validate({
            "id": 3, "day_of_week": "Monday", "start_time": "09:00:00",
            "end_time": "10:00", "class_group": 5, "class_group_name": None,
            "room": 2, "room_name": "R2", "is_locked": True, "unbekannt": 1,
        })
        assert e.start_time == 540
        assert e.end_time == 600
        assert e.day_of_week == "monday"
        assert e.class_group_name == ""
        assert e.is_locked is True

    def test_entry_with_malformed_time_stays_renderable(self):
        """Unlesbarer Beginn → 00:00."""
        e = ScheduleEntry(id=1, day_of_week="monday", start_time="??")
        assert e.start_time == 0

    def test_moved_changes_only_day_and_start(self):
        """moved() ändert nur Tag und Beginn."""
        e = ScheduleEntry(id=1, day_of_week="monday", start_time="09:00",
                          class_group=4, room=9)
        m = e.moved("tuesday", 600)
        assert (m.day_of_week, m.start_time) == ("tuesday", 600)
        assert (m.class_group, m.room, m.id) == (4, 9, 1)
        assert e.start_time == 540

    def test_conflict_entry_note(self):
        c = ConflictEntry(id=2, day_of_week="friday", start_time="12:00", note=None)
        assert c.note == ""

    def test_settings_defaults(self):
        """Leere Einstellungen → 60-Minuten-Slots, 08–17 Uhr, Mo–Fr."""
        s = TimetableSettings()
        assert s.slot_duration_minutes == 60
        assert s.fixed_duration == 60
        assert (s.window_start, s.window_end) == (480, 1020)
        assert s.enabled_days == DEFAULT_ENABLED_DAYS

    def test_settings_from_backend_payload(self):
        """Stunden als "HH:MM", None-Werte → Rückfallwerte."""
        s = TimetableSettings.model_validate({
            "timetable": 1, "slot_duration_minutes": 15,
            "preferred_class_duration": 45, "min_break_between_classes": None,
            "start_hour": "07:00", "end_hour": "15:00",
            "enabled_days": ["Monday", "Wednesday"],
        })
        assert s.fixed_duration == 45
        assert s.min_break_between_classes == 0
        assert (s.start_hour, s.end_hour) == (7, 15)
        assert s.enabled_days == ["monday", "wednesday"]

    def test_settings_without_preferred_uses_slot(self):
        assert TimetableSettings(slot_duration_minutes=30).fixed_duration == 30

    def test_settings_empty_days_fallback(self):
        assert TimetableSettings(enabled_days=[]).enabled_days == DEFAULT_ENABLED_DAYS

    def test_settings_unknown_day_raises(self):
        with pytest.raises(ValidationError):
            TimetableSettings(enabled_days=["montag"])

    def test_settings_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            TimetableSettings(start_hour=17, end_hour=8)
