from models.schedule_entry import ScheduleEntry, ConflictEntry
from models.timetable_settings import TimetableSettings
from models.placement import (
    Candidate,
    DayColumn,
    EntryPlacement,
    Geometry,
    PendingSave,
    Preview,
    ViolationReport,
)

__all__ = [
    "ScheduleEntry",
    "ConflictEntry",
    "TimetableSettings",
    "Candidate",
    "DayColumn",
    "EntryPlacement",
    "Geometry",
    "PendingSave",
    "Preview",
    "ViolationReport",
]
