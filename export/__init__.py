"""Export-Modul: Terminal-Darstellung (Rich/Textual) des Wochenrasters."""

from export.tui_renderer import render_layout_rows, render_week_rows
from export.tui_browser import StundenplanEditorApp

__all__ = ["render_layout_rows", "render_week_rows", "StundenplanEditorApp"]
