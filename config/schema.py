from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum


class StackingMode(str, Enum):
    VERTICAL = "vertical"
    COLUMNS = "columns"


# ─── DARSTELLUNG (Pixel-Geometrie des Rasters) ───

class DisplayConfig(BaseModel):
    """Pixel-Metriken für die Platzierung der Termine im Tagesraster.

    Die Werte werden nur vom Platzierungs-Rechner gelesen; das Zeichnen
    selbst übernimmt die jeweilige Oberfläche.
    """
    # Pixel pro Stunde (vertikal), daraus ergibt sich pixels_per_minute
    pixels_per_hour: int = Field(60, ge=12, le=600,
        description="Pixel pro Stunde (vertikal)")
    # Breite einer Tagesspalte in Pixeln
    column_width: int = Field(150, ge=40,
        description="Breite einer Tagesspalte in Pixeln")
    # Innenabstand oben/unten bzw. links/rechts eines Termins
    padding_px: int = Field(4, ge=0, le=32,
        description="Innenabstand eines Termins")
    # Mindesthöhe, damit sehr kurze Termine klickbar bleiben
    min_height_px: int = Field(8, ge=1,
        description="Mindesthöhe eines Termins")
    # Mindestbreite eines Termins
    min_width_px: int = Field(40, ge=1,
        description="Mindestbreite eines Termins")
    # Obergrenze für den vertikalen Versatz pro Lane (Modus "vertical")
    max_stack_offset_px: int = Field(16, ge=0,
        description="Max. vertikaler Versatz pro Lane")
    # Versatz pro Lane als Anteil der Slot-Höhe
    stack_offset_ratio: float = Field(0.4, ge=0.0, le=1.0,
        description="Versatz pro Lane relativ zur Slot-Höhe")
    # Linker Rand im Modus "columns"
    columns_gutter_px: int = Field(8, ge=0,
        description="Linker Rand im Spalten-Modus")
    # Stapelmodus für überlappende Termine
    stacking_mode: StackingMode = Field(StackingMode.VERTICAL,
        description="Überlappende Termine gestapelt oder nebeneinander")

    @property
    def pixels_per_minute(self) -> float:
        return self.pixels_per_hour / 60


# ─── BACKEND-API ───

class ApiConfig(BaseModel):
    """Zugang zum Stundenplan-Backend (REST)."""
    # Basis-URL des Backends, z.B. "https://campus.example.org"
    base_url: str = Field("http://localhost:8000",
        description="Basis-URL des Backends")
    # Listen-/Update-Endpunkt der Termine
    schedules_path: str = Field("/api/v1/logx/timetabling/class-group-schedules/",
        description="Endpunkt der Termine")
    # Endpunkt der Stundenplan-Einstellungen
    settings_path: str = Field("/api/v1/logx/timetabling/timetable-settings/",
        description="Endpunkt der Stundenplan-Einstellungen")
    # Endpunkt der serverseitigen Konfliktprüfung
    conflicts_path: str = Field("/api/v1/logx/timetabling/class-group-schedules/check-conflicts/",
        description="Endpunkt der Konfliktprüfung")
    # Timeout pro Request in Sekunden
    timeout_seconds: float = Field(10.0, gt=0, le=120,
        description="Timeout pro Request (Sekunden)")
    # Seitengröße beim Laden der Termine
    page_size: int = Field(1000, ge=1,
        description="Seitengröße beim Laden der Termine")
    # Optionales Bearer-Token (Anmeldung selbst ist nicht Teil des Editors)
    token: Optional[str] = Field(None,
        description="Bearer-Token für das Backend")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# ─── BENACHRICHTIGUNGEN ───

class NotificationConfig(BaseModel):
    """Erfolgs-/Fehlermeldungen der Oberfläche."""
    # Nach wie vielen Sekunden eine Meldung automatisch verschwindet
    auto_dismiss_seconds: float = Field(4.0, ge=0.5, le=60,
        description="Automatisches Ausblenden (Sekunden)")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Log-Ausgabe des Editors."""
    # Python-Loglevel, z.B. "INFO" oder "WARNING"
    level: str = Field("WARNING",
        description="Loglevel (DEBUG, INFO, WARNING, ERROR)")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unbekanntes Loglevel: {v}")
        return v


# ─── GESAMT-CONFIG ───

class EditorConfig(BaseModel):
    """Gesamtkonfiguration des Stundenplan-Editors."""
    # Stundenplan, der standardmäßig geöffnet wird
    timetable_id: int = Field(1, ge=1,
        description="Standard-Stundenplan")
    # Pixel-Geometrie des Rasters
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    # Backend-Zugang
    api: ApiConfig = Field(default_factory=ApiConfig)
    # Benachrichtigungen
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
