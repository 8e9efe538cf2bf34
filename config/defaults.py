from config.schema import (
    ApiConfig,
    DisplayConfig,
    EditorConfig,
    LoggingConfig,
    NotificationConfig,
    StackingMode,
)


# ─── Rückfallwerte, wenn das Backend keine Einstellungen liefert ─────────────

DEFAULT_SLOT_MINUTES = 60
DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 17

DEFAULT_ENABLED_DAYS: list[str] = [
    "monday", "tuesday", "wednesday", "thursday", "friday",
]

ALL_DAYS: list[str] = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]

# Anzeigenamen für Tabellenköpfe
DAY_LABELS: dict[str, str] = {
    "monday": "Mo",
    "tuesday": "Di",
    "wednesday": "Mi",
    "thursday": "Do",
    "friday": "Fr",
    "saturday": "Sa",
    "sunday": "So",
}


def default_display() -> DisplayConfig:
    """Standard-Raster: 60 px pro Stunde, 150 px breite Tagesspalten.

    Überlappende Termine werden vertikal gestapelt (Versatz max. 16 px),
    Mindestgröße eines Termins 40×8 px.
    """
    return DisplayConfig(
        pixels_per_hour=60,
        column_width=150,
        padding_px=4,
        min_height_px=8,
        min_width_px=40,
        max_stack_offset_px=16,
        stack_offset_ratio=0.4,
        columns_gutter_px=8,
        stacking_mode=StackingMode.VERTICAL,
    )


def default_editor_config() -> EditorConfig:
    """Vollständige Standardkonfiguration (lokales Backend auf Port 8000)."""
    return EditorConfig(
        timetable_id=1,
        display=default_display(),
        api=ApiConfig(),
        notifications=NotificationConfig(auto_dismiss_seconds=4.0),
        logging=LoggingConfig(level="WARNING"),
    )
