"""Transiente Platzierungs-Objekte: Vorschau, Kandidat, Geometrie, Prüfbericht."""

from pydantic import BaseModel, ConfigDict, Field

from models.clock import format_time
from models.schedule_entry import ConflictEntry, ScheduleEntry


class Preview(BaseModel):
    """Kandidaten-Lage, die nur während einer Ziehgeste angezeigt wird."""

    model_config = ConfigDict(frozen=True)

    day_index: int
    start_minute: int
    duration_minutes: int

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes


class Candidate(BaseModel):
    """Vorgeschlagene neue Lage eines Termins (nur Tag und Beginn ändern sich)."""

    model_config = ConfigDict(frozen=True)

    id: int
    day_of_week: str
    start_time: int          # Minuten seit Mitternacht

    def __str__(self) -> str:
        return f"#{self.id} → {self.day_of_week} {format_time(self.start_time)}"


class Geometry(BaseModel):
    """Pixel-Rechteck eines Termins relativ zur Tagesspalte."""

    model_config = ConfigDict(frozen=True)

    top: int
    height: int
    left: int
    width: int
    z_index: int = 20


class EntryPlacement(BaseModel):
    """Ein Termin mit Lane und Geometrie, fertig für die Darstellung."""

    entry_id: int
    day_index: int
    lane: int
    lane_count: int
    geometry: Geometry
    is_locked: bool = False
    is_conflict: bool = False
    start_minute: int
    end_minute: int
    label: str = ""


class DayColumn(BaseModel):
    """Alle Termine eines Tages mit zugewiesenen Lanes."""

    day: str
    day_index: int
    lane_count: int
    placements: list[EntryPlacement] = Field(default_factory=list)


class ViolationReport(BaseModel):
    """Zusammengeführtes Ergebnis aus lokaler und serverseitiger Prüfung."""

    local_violations: list[str] = Field(default_factory=list)
    server_conflicts: list[ConflictEntry] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.local_violations and not self.server_conflicts

    def summary(self) -> str:
        lines = list(self.local_violations)
        if self.server_conflicts:
            lines.append(
                f"Server meldet {len(self.server_conflicts)} Konflikt(e)."
            )
        return "\n".join(lines) if lines else "Keine Verletzungen."

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KEINE VERLETZUNGEN[/bold green]"
            if self.is_clean
            else "[bold red]✗ VERSCHIEBUNG BLOCKIERT[/bold red]"
        )
        lines = [
            status,
            f"Lokal: {len(self.local_violations)} | Server: {len(self.server_conflicts)}",
        ]
        console.print(Panel("\n".join(lines), title="Konfliktprüfung", border_style="cyan"))

        if self.local_violations:
            for v in self.local_violations:
                console.print(f"  [yellow]•[/yellow] {v}")

        if self.server_conflicts:
            table = Table(box=box.ROUNDED, title="Konflikte laut Server")
            table.add_column("ID", justify="right")
            table.add_column("Tag")
            table.add_column("Beginn")
            table.add_column("Gruppe")
            table.add_column("Raum")
            table.add_column("Hinweis")
            for c in self.server_conflicts:
                table.add_row(
                    str(c.id), c.day_of_week, format_time(c.start_time),
                    c.class_group_name, c.room_name, c.note,
                )
            console.print(table)


class PendingSave(BaseModel):
    """Blockierter Kandidat samt Verletzungen; wartet auf Bestätigung."""

    candidate: Candidate
    entry: ScheduleEntry                 # Termin mit Kandidaten-Lage
    report: ViolationReport

    @property
    def local_violations(self) -> list[str]:
        return self.report.local_violations

    @property
    def server_conflicts(self) -> list[ConflictEntry]:
        return self.report.server_conflicts
