"""Stundenplan-Editor — Haupt-CLI.

Verwendung:
  python main.py setup                       Ersteinrichtung (Wizard)
  python main.py config show                 Konfiguration anzeigen
  python main.py generate                    Demo-Stundenplan erzeugen
  python main.py show                        Wochenraster mit Lanes anzeigen
  python main.py layout --day monday         Geometrie pro Termin anzeigen
  python main.py stats                       Kennzahlen anzeigen
  python main.py move 7 --day tuesday --start 10:00
                                             Termin verschieben (mit Prüfung)
  python main.py nudge 7 --slots 1           Termin um Slots/Tage verschieben
  python main.py browse                      Interaktiver Editor (Textual)

Alle Befehle außer setup/config/generate lesen standardmäßig die lokale
Datendatei (--data); mit --api wird das Backend aus der Konfiguration benutzt.
"""

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
logger = logging.getLogger(__name__)

# Standard-Pfad für die lokale Datendatei
DEFAULT_DATA_JSON = Path("output/timetable.json")


def _setup_logging(verbose: bool) -> None:
    """Konfiguriert das Logging einmalig über RichHandler."""
    from config.manager import ConfigManager

    level = "WARNING"
    mgr = ConfigManager()
    if not mgr.first_run_check():
        try:
            level = mgr.load().logging.level
        except ValueError:
            pass  # ungültige Config meldet der jeweilige Befehl
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_config_or_default():
    """Wie _load_config_or_abort, ohne Config aber mit Standardwerten."""
    from config.defaults import default_editor_config
    from config.manager import ConfigManager
    if ConfigManager().first_run_check():
        return default_editor_config()
    return _load_config_or_abort()[1]


@asynccontextmanager
async def _open_session(config, data_path: Path, use_api: bool, timetable_id: Optional[int]):
    """Öffnet eine geladene EditorSession auf Datei oder Backend.

    Liefert (session, backend); backend ist None im API-Modus.
    """
    from data.api_client import TimetableApiClient
    from data.memory_backend import InMemoryBackend
    from editor.session import EditorSession

    if use_api:
        async with TimetableApiClient(config.api) as client:
            session = EditorSession(client, client, client, config=config,
                                    timetable_id=timetable_id)
            await session.load()
            try:
                yield session, None
            finally:
                session.close()
        return

    backend = InMemoryBackend.load_json(data_path)
    session = EditorSession(backend, backend, backend, config=config,
                            timetable_id=timetable_id or backend.timetable_id)
    await session.load()
    try:
        yield session, backend
    finally:
        session.close()


def _run(coro):
    """Führt einen Befehl aus; fehlende Datendatei wird freundlich gemeldet."""
    try:
        code = asyncio.run(coro)
    except FileNotFoundError as e:
        console.print(
            f"[red]{e}[/red]\n"
            "Erzeugen Sie Demo-Daten mit [bold]python main.py generate[/bold]."
        )
        sys.exit(1)
    if code:
        sys.exit(code)


def _print_notification(session) -> None:
    note = session.notification
    if note is not None and note.kind.value == "error":
        console.print(f"[yellow]⚠ {note.message}[/yellow]")


def _source_options(func):
    """Gemeinsame Optionen für die Datenquelle."""
    func = click.option("--timetable", "timetable_id", type=int, default=None,
                        help="Stundenplan-ID (Standard aus Config bzw. Datei).")(func)
    func = click.option("--api", "use_api", is_flag=True, default=False,
                        help="Backend aus der Konfiguration statt lokaler Datei.")(func)
    func = click.option("--data", "data_path", default=str(DEFAULT_DATA_JSON),
                        type=click.Path(path_type=Path),
                        help="Lokale Datendatei (JSON).")(func)
    return func


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Editor-Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py generate[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    from config.wizard import show_config_table

    mgr, config = _load_config_or_abort()
    console.print(Panel(
        f"[bold]Stundenplan {config.timetable_id}[/bold]  |  {config.api.base_url}",
        title="Editor-Konfiguration",
        border_style="cyan",
    ))
    show_config_table(config)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--output", "-o", "output", default=str(DEFAULT_DATA_JSON),
              type=click.Path(path_type=Path), help="Pfad der Datendatei.")
@click.option("--timetable", "timetable_id", default=1, help="Stundenplan-ID.")
def cmd_generate(seed: int, output: Path, timetable_id: int):
    """Erzeugt einen Demo-Stundenplan (Einstellungen + Termine) als JSON."""
    from data.fake_data import FakeScheduleGenerator

    console.print("[bold]Demo-Stundenplan wird generiert...[/bold]")
    gen = FakeScheduleGenerator(seed=seed, timetable_id=timetable_id)
    backend = gen.generate()
    gen.print_summary(backend)
    backend.save_json(output)
    console.print(f"[green]✓[/green] JSON gespeichert: {output}")


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@_source_options
@click.option("--stacking", type=click.Choice(["vertical", "columns"]), default=None,
              help="Stapelmodus für überlappende Termine.")
@click.option("--search", default="", help="Freitext-Filter (Gruppe, Raum).")
@click.option("--room", type=int, default=None, help="Nur dieser Raum (ID).")
@click.option("--group", "class_group", type=int, default=None,
              help="Nur diese Klassengruppe (ID).")
def cmd_show(data_path: Path, use_api: bool, timetable_id: Optional[int],
             stacking: Optional[str], search: str, room: Optional[int],
             class_group: Optional[int]):
    """Zeigt das Wochenraster mit Lanes als Tabelle."""
    from config.schema import StackingMode
    from export.tui_renderer import day_headers, render_week_rows

    config = _load_config_or_default()

    async def _show():
        async with _open_session(config, data_path, use_api, timetable_id) as (session, _):
            _print_notification(session)
            if stacking:
                session.set_stacking_mode(StackingMode(stacking))
            session.set_filter(search=search, room=room, class_group=class_group)

            table = Table(title=f"Stundenplan {session.timetable_id}",
                          box=box.ROUNDED, show_lines=True)
            table.add_column("Zeit", style="bold")
            for header in day_headers(session.grid):
                table.add_column(header)
            for row in render_week_rows(session.layout(), session.grid):
                table.add_row(*row)
            console.print(table)

            lanes = ", ".join(
                f"{c.day[:2].title()}={c.lane_count}" for c in session.layout()
            )
            console.print(f"[dim]Lanes pro Tag: {lanes}[/dim]")

    _run(_show())


# ─── LAYOUT ───────────────────────────────────────────────────────────────────

@click.command("layout")
@_source_options
@click.option("--day", default=None, help="Nur dieser Wochentag (z.B. monday).")
@click.option("--stacking", type=click.Choice(["vertical", "columns"]), default=None,
              help="Stapelmodus für überlappende Termine.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Ausgabe als JSON.")
def cmd_layout(data_path: Path, use_api: bool, timetable_id: Optional[int],
               day: Optional[str], stacking: Optional[str], as_json: bool):
    """Zeigt Lane und Pixel-Geometrie jedes Termins."""
    from config.schema import StackingMode
    from export.tui_renderer import LAYOUT_HEADERS, layout_as_dict, render_layout_rows

    config = _load_config_or_default()

    async def _layout():
        async with _open_session(config, data_path, use_api, timetable_id) as (session, _):
            if stacking:
                session.set_stacking_mode(StackingMode(stacking))
            columns = session.layout()
            if day:
                columns = [c for c in columns if c.day == day.strip().lower()]
                if not columns:
                    console.print(f"[red]Tag '{day}' ist nicht im Raster.[/red]")
                    return 1

            if as_json:
                click.echo(json.dumps(layout_as_dict(columns), indent=2, ensure_ascii=False))
                return 0

            table = Table(title="Platzierung", box=box.ROUNDED)
            for header in LAYOUT_HEADERS:
                table.add_column(header, justify="right" if header in ("top", "height",
                                 "left", "width", "z") else "left")
            for row in render_layout_rows(columns):
                table.add_row(*row)
            console.print(table)
            console.print(
                f"[dim]Rasterhöhe {session.grid.total_height} px, "
                f"{session.grid.slot_count} Slots à {session.grid.slot_minutes} min[/dim]"
            )

    _run(_layout())


# ─── STATS ────────────────────────────────────────────────────────────────────

@click.command("stats")
@_source_options
@click.option("--search", default="", help="Freitext-Filter (Gruppe, Raum).")
def cmd_stats(data_path: Path, use_api: bool, timetable_id: Optional[int], search: str):
    """Zeigt Kennzahlen der (gefilterten) Terminliste."""
    config = _load_config_or_default()

    async def _stats():
        async with _open_session(config, data_path, use_api, timetable_id) as (session, _):
            _print_notification(session)
            session.set_filter(search=search)
            session.stats().print_rich()

    _run(_stats())


# ─── MOVE / NUDGE ─────────────────────────────────────────────────────────────

def _report_commit(result, backend, data_path: Path) -> int:
    """Gibt das Ergebnis eines Commit-Versuchs aus und speichert die Datei.

    Rückgabe ist der Exit-Code (0 nur bei Erfolg oder ohne Änderung).
    """
    from editor.commit import CommitStatus

    status = result.status
    if status == CommitStatus.COMMITTED:
        if backend is not None:
            backend.save_json(data_path)
        console.print(f"[green]✓[/green] Gespeichert: {result.entry}")
        return 0
    if status == CommitStatus.NOOP:
        console.print("[dim]Keine Änderung.[/dim]")
        return 0
    if status == CommitStatus.PENDING and result.report is not None:
        result.report.print_rich()
        console.print("[yellow]Verschiebung nicht gespeichert.[/yellow]")
    else:
        console.print(f"[red]{status.value}:[/red] {result.message}")
    return 1


@click.command("move")
@click.argument("entry_id", type=int)
@_source_options
@click.option("--day", default=None, help="Neuer Wochentag (z.B. tuesday).")
@click.option("--start", default=None, help="Neuer Beginn (HH:MM).")
def cmd_move(entry_id: int, data_path: Path, use_api: bool, timetable_id: Optional[int],
             day: Optional[str], start: Optional[str]):
    """Verschiebt einen Termin nach Prüfung (lokal + Server)."""
    from models.clock import format_time, parse_time
    from models.placement import Candidate

    if day is None and start is None:
        raise click.UsageError("Mindestens --day oder --start angeben.")
    config = _load_config_or_default()

    async def _move():
        async with _open_session(config, data_path, use_api, timetable_id) as (session, backend):
            entry = session.store.get(entry_id)
            if entry is None:
                console.print(f"[red]Termin {entry_id} nicht gefunden.[/red]")
                return 1
            new_day = day.strip().lower() if day else entry.day_of_week
            if session.grid.day_index(new_day) is None:
                console.print(f"[red]Tag '{new_day}' ist nicht im Raster.[/red]")
                return 1
            new_start = entry.start_time
            if start is not None:
                raw = parse_time(start)
                new_start = session.grid.snap_and_clamp(raw)
                if new_start != raw:
                    console.print(
                        f"[dim]Beginn auf Raster gesetzt: {format_time(raw)} → "
                        f"{format_time(new_start)}[/dim]"
                    )
            candidate = Candidate(id=entry_id, day_of_week=new_day, start_time=new_start)
            result = await session.commit.submit(candidate)
            return _report_commit(result, backend, data_path)

    _run(_move())


@click.command("nudge")
@click.argument("entry_id", type=int)
@_source_options
@click.option("--slots", default=0, help="Slots nach unten (+) bzw. oben (−).")
@click.option("--days", default=0, help="Tage nach rechts (+) bzw. links (−).")
def cmd_nudge(entry_id: int, data_path: Path, use_api: bool, timetable_id: Optional[int],
              slots: int, days: int):
    """Verschiebt einen Termin wie per Pfeiltaste (am Rand begrenzt)."""
    from editor.controller import InteractionError

    config = _load_config_or_default()

    async def _nudge():
        async with _open_session(config, data_path, use_api, timetable_id) as (session, backend):
            try:
                result = await session.controller.nudge(
                    entry_id, slots * session.grid.slot_minutes, days
                )
            except InteractionError as e:
                console.print(f"[red]{e}[/red]")
                return 1
            return _report_commit(result, backend, data_path)

    _run(_nudge())


# ─── BROWSE ───────────────────────────────────────────────────────────────────

@click.command("browse")
@_source_options
def cmd_browse(data_path: Path, use_api: bool, timetable_id: Optional[int]):
    """Startet den interaktiven Editor (Textual)."""
    from data.api_client import TimetableApiClient
    from data.memory_backend import InMemoryBackend
    from editor.session import EditorSession
    from export.tui_browser import StundenplanEditorApp

    config = _load_config_or_default()
    if use_api:
        client = TimetableApiClient(config.api)
        session = EditorSession(client, client, client, config=config,
                                timetable_id=timetable_id)
        StundenplanEditorApp(session, on_close=client.aclose).run()
        return

    try:
        backend = InMemoryBackend.load_json(data_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    async def _persist() -> None:
        backend.save_json(data_path)

    session = EditorSession(backend, backend, backend, config=config,
                            timetable_id=timetable_id or backend.timetable_id)
    StundenplanEditorApp(session, on_close=_persist).run()


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben.")
def cli(verbose: bool):
    """Interaktiver Stundenplan-Editor: Raster, Lanes, Konfliktprüfung.

    Starten Sie mit: python main.py generate && python main.py show
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Stundenplan-Editor![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_show)
cli.add_command(cmd_layout)
cli.add_command(cmd_stats)
cli.add_command(cmd_move)
cli.add_command(cmd_nudge)
cli.add_command(cmd_browse)


if __name__ == "__main__":
    main()
