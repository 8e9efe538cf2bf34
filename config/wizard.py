"""Interaktiver Setup-Wizard für die Ersteinrichtung des Stundenplan-Editors.

Führt den Nutzer Schritt für Schritt durch alle Konfigurationsbereiche.
Nutzt rich für schöne Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    ApiConfig,
    DisplayConfig,
    EditorConfig,
    LoggingConfig,
    NotificationConfig,
    StackingMode,
)
from config.defaults import default_display, default_editor_config

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def show_config_table(config: EditorConfig) -> None:
    """Zeigt alle Konfigurationswerte als rich-Tabelle an."""
    table = Table(title="Editor-Konfiguration", box=box.ROUNDED)
    table.add_column("Bereich", style="bold")
    table.add_column("Parameter")
    table.add_column("Wert")
    table.add_row("", "timetable_id", str(config.timetable_id))
    for section in ("display", "api", "notifications", "logging"):
        values = getattr(config, section).model_dump(mode="json")
        for i, (k, v) in enumerate(values.items()):
            if k == "token" and v:
                v = "••••••"
            table.add_row(section if i == 0 else "", k, str(v))
    console.print(table)


# ─── SCHRITT 1: Backend ───

def _wizard_api() -> tuple[ApiConfig, int]:
    _header("Schritt 1 — Backend")
    _info("Adresse des Stundenplan-Backends und Standard-Stundenplan.")

    defaults = ApiConfig()
    base_url = Prompt.ask("Basis-URL", default=defaults.base_url)
    timeout = FloatPrompt.ask("Timeout pro Request (Sekunden)",
                              default=defaults.timeout_seconds)
    token = Prompt.ask("Bearer-Token (leer = keins)", default="")
    timetable_id = IntPrompt.ask("Stundenplan-ID", default=1)
    api = ApiConfig(
        base_url=base_url,
        timeout_seconds=timeout,
        token=token or None,
    )
    return api, timetable_id


# ─── SCHRITT 2: Darstellung ───

def _wizard_display() -> DisplayConfig:
    _header("Schritt 2 — Darstellung")
    default = default_display()

    if Confirm.ask("Standard-Darstellung übernehmen (60 px/h, 150 px Spalten)?",
                   default=True):
        _success("Standard-Darstellung übernommen.")
        return default

    pph = IntPrompt.ask("Pixel pro Stunde", default=default.pixels_per_hour)
    width = IntPrompt.ask("Spaltenbreite (px)", default=default.column_width)
    console.print("Stapelmodus: [1] vertikal versetzt  [2] nebeneinander")
    mode = StackingMode.COLUMNS if Prompt.ask("Modus", default="1") == "2" \
        else StackingMode.VERTICAL
    return default.model_copy(update={
        "pixels_per_hour": pph,
        "column_width": width,
        "stacking_mode": mode,
    })


# ─── SCHRITT 3: Meldungen & Logging ───

def _wizard_misc() -> tuple[NotificationConfig, LoggingConfig]:
    _header("Schritt 3 — Meldungen & Logging")
    seconds = FloatPrompt.ask("Meldungen ausblenden nach (Sekunden)", default=4.0)
    level = Prompt.ask("Loglevel", default="WARNING",
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return (NotificationConfig(auto_dismiss_seconds=seconds),
            LoggingConfig(level=level))


def run_wizard() -> Optional[EditorConfig]:
    """Führt den vollständigen interaktiven Setup-Wizard aus.

    Returns:
        Fertige EditorConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen beim Stundenplan-Editor![/bold]\n\n"
        "Der Wizard richtet Backend-Zugang und Rasterdarstellung ein.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Stundenplan-Editor[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie den Editor jetzt einrichten?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        api, timetable_id = _wizard_api()
        display = _wizard_display()
        notifications, logging_cfg = _wizard_misc()

        config = default_editor_config().model_copy(update={
            "timetable_id": timetable_id,
            "api": api,
            "display": display,
            "notifications": notifications,
            "logging": logging_cfg,
        })

        show_config_table(config)

        if not Confirm.ask("\nKonfiguration speichern?", default=True):
            console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
            return None

        _success("Konfiguration wird gespeichert...")
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
