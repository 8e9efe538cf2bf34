"""Textual TUI Editor für den Stundenplan.

Startet mit: python main.py browse
Navigation: ↑↓ Termin wählen, Shift+Pfeile verschieben, /=Suche,
v=Konflikt-Vorschau, x=PendingSave verwerfen, r=Neu laden, q=Beenden
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from editor.session import EditorSession

logger = logging.getLogger(__name__)


class StundenplanEditorApp:
    """Textual TUI App als Oberfläche für eine EditorSession.

    Lazy-importiert textual um Startzeit zu minimieren.
    """

    def __init__(
        self,
        session: "EditorSession",
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self.session = session
        self.on_close = on_close

    def run(self) -> None:
        """Startet die TUI Anwendung."""
        from textual.app import App, ComposeResult
        from textual.binding import Binding
        from textual.containers import Horizontal
        from textual.widgets import DataTable, Footer, Header, Input, Static

        from export.tui_renderer import day_headers, render_week_rows

        session = self.session
        on_close = self.on_close

        class _App(App):
            CSS = """
            #entry_table { width: 48; border: solid $primary; }
            #week_table { border: solid $secondary; }
            #banner { height: auto; padding: 0 1; }
            Input { dock: bottom; }
            """
            BINDINGS = [
                Binding("q", "quit", "Beenden"),
                Binding("shift+up", "nudge('ArrowUp')", "Früher"),
                Binding("shift+down", "nudge('ArrowDown')", "Später"),
                Binding("shift+left", "nudge('ArrowLeft')", "Tag zurück"),
                Binding("shift+right", "nudge('ArrowRight')", "Tag vor"),
                Binding("x", "dismiss_pending", "Verwerfen"),
                Binding("v", "preview_conflict", "Konflikt zeigen"),
                Binding("r", "reload", "Neu laden"),
                Binding("/", "focus_search", "Suche"),
            ]

            def compose(self) -> ComposeResult:
                yield Header()
                yield Static("", id="banner")
                with Horizontal():
                    yield DataTable(id="entry_table", cursor_type="row")
                    yield DataTable(id="week_table")
                yield Input(placeholder="Suche (Gruppe oder Raum)...", id="search")
                yield Footer()

            async def on_mount(self) -> None:
                self._row_ids: list[int] = []
                entry_table = self.query_one("#entry_table", DataTable)
                entry_table.add_columns("ID", "Tag", "Beginn", "Gruppe", "Raum")
                await session.load()
                self._refresh()

            async def on_unmount(self) -> None:
                session.close()
                if on_close is not None:
                    await on_close()

            # ─── Anzeige ───

            def _refresh(self) -> None:
                entry_table = self.query_one("#entry_table", DataTable)
                cursor = entry_table.cursor_row
                entry_table.clear()
                entries = sorted(
                    session.visible_entries,
                    key=lambda e: (session.grid.day_index(e.day_of_week) or 0, e.start_time, e.id),
                )
                self._row_ids = [e.id for e in entries]
                for e in entries:
                    lock = " (fix)" if e.is_locked else ""
                    entry_table.add_row(
                        str(e.id), e.day_of_week[:2].title(), e.start_label,
                        f"{e.class_group_name}{lock}", e.room_name,
                    )
                if self._row_ids:
                    entry_table.move_cursor(row=min(cursor, len(self._row_ids) - 1))

                week_table = self.query_one("#week_table", DataTable)
                week_table.clear(columns=True)
                week_table.add_columns("Zeit", *day_headers(session.grid))
                for row in render_week_rows(
                    session.layout(), session.grid, session.controller.preview
                ):
                    week_table.add_row(*row, height=None)

                self._render_banner()

            def _render_banner(self) -> None:
                banner = self.query_one("#banner", Static)
                lines: list[str] = []
                pending = session.pending_save
                if pending is not None:
                    lines.append(f"[bold red]Blockiert:[/bold red] {pending.candidate}")
                    lines.extend(f"  • {v}" for v in pending.local_violations)
                    if pending.server_conflicts:
                        lines.append(
                            f"  • Server meldet {len(pending.server_conflicts)} Konflikt(e) "
                            "– v: anzeigen, x: verwerfen"
                        )
                note = session.notification
                if note is not None:
                    color = "red" if note.kind.value == "error" else "green"
                    lines.append(f"[{color}]{note.message}[/{color}]")
                stats = session.stats()
                lines.append(
                    f"[dim]{stats.total_classes} Termine | {stats.rooms_used} Räume | "
                    f"{stats.groups_scheduled} Gruppen | {stats.locked_classes} fix[/dim]"
                )
                banner.update("\n".join(lines))

            def _selected_id(self) -> int | None:
                row = self.query_one("#entry_table", DataTable).cursor_row
                if 0 <= row < len(self._row_ids):
                    return self._row_ids[row]
                return None

            # ─── Aktionen ───

            async def action_nudge(self, key: str) -> None:
                entry_id = self._selected_id()
                if entry_id is None:
                    return
                session.controller.select(entry_id)
                result = await session.controller.key_press(key)
                if result is not None:
                    logger.debug(f"Nudge #{entry_id}: {result.status.value}")
                self._refresh()

            def action_dismiss_pending(self) -> None:
                session.dismiss()
                self._refresh()

            def action_preview_conflict(self) -> None:
                pending = session.pending_save
                if pending is None or not pending.server_conflicts:
                    return
                session.preview_conflict(pending.server_conflicts[0])
                self._refresh()

            async def action_reload(self) -> None:
                await session.load()
                self._refresh()

            def action_focus_search(self) -> None:
                self.query_one("#search", Input).focus()

            def on_input_changed(self, event: Input.Changed) -> None:
                session.set_filter(search=event.value)
                self._refresh()

        _App().run()
