"""Konfigurationsmanager: Laden, Speichern und Validieren der Editor-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import EditorConfig

console = Console()
logger = logging.getLogger(__name__)
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Stundenplan-Editor — Konfiguration
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "display": (
        "Darstellung",
        "Pixel-Geometrie des Rasters. stacking_mode: vertical | columns",
    ),
    "api": (
        "Backend",
        "REST-Endpunkte für Termine, Einstellungen und Konfliktprüfung.",
    ),
    "notifications": (
        "Benachrichtigungen",
        None,
    ),
    "logging": (
        "Logging",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "editor_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> EditorConfig:
        """Liest die YAML-Datei und validiert sie gegen EditorConfig.

        Fehlende Datei → FileNotFoundError, ungültiger Inhalt → ValueError.
        """
        target = Path(path) if path is not None else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um den Editor einzurichten."
            )
        raw = yaml.load(target.read_text(encoding="utf-8")) or {}
        try:
            config = EditorConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(f"Konfigurationsdatei ungültig: {target}\n{e}") from e
        logger.debug(f"Konfiguration geladen: {target} (Stundenplan {config.timetable_id})")
        return config

    # ─── Speichern ───

    def save(self, config: EditorConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Config als kommentierte YAML-Datei."""
        target = Path(path) if path is not None else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(self._build_commented_yaml(config), f)
        console.print(f"[green]✓[/green] Editor-Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: EditorConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        # Inline-Kommentar für das Token
        if "api" in cm:
            api_map = CommentedMap(cm["api"])
            api_map.yaml_add_eol_comment("optional, Bearer-Header", "token")
            cm["api"] = api_map

        return cm
