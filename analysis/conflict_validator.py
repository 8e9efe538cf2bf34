"""Konflikt- und Regelprüfung einer Kandidaten-Lage.

Prüft lokal gegen die geladene Terminliste (Überschneidung, Termindauer,
Mindestpause, maximale Anzahl aufeinanderfolgender Termine) und fragt
anschließend immer die maßgebliche Konfliktprüfung des Backends ab.
Beide Ergebnisse landen in einem ViolationReport.
"""

import logging
from typing import Optional, Sequence

from data.services import ConflictService, ServiceError
from grid.time_grid import TimeGrid
from models.clock import format_time
from models.placement import Candidate, ViolationReport
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings

logger = logging.getLogger(__name__)


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Halboffene Intervalle [a_start, a_end) und [b_start, b_end) schneiden sich."""
    return b_start < a_end and b_end > a_start


class ConflictValidator:
    """Bewertet Kandidaten für genau einen Stundenplan."""

    def __init__(
        self,
        timetable_id: int,
        grid: TimeGrid,
        conflicts: ConflictService,
        settings: Optional[TimetableSettings] = None,
    ) -> None:
        self.timetable_id = timetable_id
        self.grid = grid
        self.conflicts = conflicts
        self.settings = settings

    @property
    def duration(self) -> int:
        return self.grid.duration

    # ── Lokale Prüfungen ──────────────────────────────────────────────────────

    def has_local_overlap(self, candidate: Candidate, entries: Sequence[ScheduleEntry]) -> bool:
        """Überschneidet der Kandidat einen anderen Termin am selben Tag?"""
        start = candidate.start_time
        end = start + self.duration
        return any(
            overlaps(start, end, e.start_time, e.start_time + self.duration)
            for e in entries
            if e.id != candidate.id and e.day_of_week == candidate.day_of_week
        )

    def check_constraints(
        self, candidate: Candidate, entries: Sequence[ScheduleEntry]
    ) -> list[str]:
        """Regeln aus den Einstellungen; ohne geladene Einstellungen keine Prüfung."""
        violations: list[str] = []
        s = self.settings
        if s is None:
            return violations

        preferred = s.preferred_class_duration or 0
        min_break = s.min_break_between_classes or 0
        max_consec = s.max_consecutive_classes or 0
        start = candidate.start_time
        end = start + self.duration

        if preferred > 0 and self.duration != preferred:
            violations.append(
                f"Dauer {self.duration} min entspricht nicht der bevorzugten "
                f"Termindauer von {preferred} min."
            )

        group = self._class_group_of(candidate, entries)
        if group is None:
            return violations
        same_group = [
            e for e in entries
            if e.id != candidate.id
            and e.day_of_week == candidate.day_of_week
            and e.class_group == group
        ]

        if min_break > 0:
            for e in same_group:
                e_start = e.start_time
                e_end = e_start + self.duration
                gap = max(0, min(abs(e_start - end), abs(start - e_end)))
                if gap < min_break:
                    violations.append(
                        f"Pause zwischen zwei Terminen der Gruppe beträgt {gap} min "
                        f"und liegt unter dem Minimum von {min_break} min."
                    )
                    break

        if max_consec > 0:
            times = sorted(
                [(e.start_time, e.start_time + self.duration) for e in same_group]
                + [(start, end)]
            )
            run = longest = 1
            for (_, prev_end), (next_start, _) in zip(times, times[1:]):
                if next_start - prev_end <= min_break:
                    run += 1
                else:
                    run = 1
                longest = max(longest, run)
            if longest > max_consec:
                violations.append(
                    f"Die Änderung ergäbe {longest} aufeinanderfolgende Termine "
                    f"für die Gruppe (Grenze: {max_consec})."
                )

        return violations

    def check_local(self, candidate: Candidate, entries: Sequence[ScheduleEntry]) -> list[str]:
        violations: list[str] = []
        if self.has_local_overlap(candidate, entries):
            violations.append("Der Termin überschneidet sich mit einem bestehenden Termin.")
        violations.extend(self.check_constraints(candidate, entries))
        return violations

    @staticmethod
    def _class_group_of(candidate: Candidate, entries: Sequence[ScheduleEntry]) -> Optional[int]:
        for e in entries:
            if e.id == candidate.id:
                return e.class_group
        return None

    # ── Server ────────────────────────────────────────────────────────────────

    async def check_server(self, candidate: Candidate) -> list[ConflictEntry]:
        """Fragt das Backend; bei Fehlern wird mit dem lokalen Ergebnis weitergearbeitet."""
        day_index = self.grid.day_index(candidate.day_of_week)
        if day_index is None:
            logger.warning(f"{candidate}: Tag nicht im Raster, Server-Prüfung übersprungen")
            return []
        try:
            return await self.conflicts.check_conflicts(
                self.timetable_id,
                day_index,
                format_time(candidate.start_time),
                format_time(candidate.start_time + self.duration),
                exclude_id=candidate.id,
            )
        except ServiceError as e:
            logger.warning(f"Server-Konfliktprüfung fehlgeschlagen, nur lokale Prüfung: {e}")
            return []

    async def validate(
        self, candidate: Candidate, entries: Sequence[ScheduleEntry]
    ) -> ViolationReport:
        """Lokale Prüfung plus Server-Prüfung, zusammengeführt."""
        local = self.check_local(candidate, entries)
        server = await self.check_server(candidate)
        report = ViolationReport(local_violations=local, server_conflicts=server)
        if not report.is_clean:
            logger.info(
                f"{candidate}: {len(local)} lokale Verletzung(en), "
                f"{len(server)} Server-Konflikt(e)"
            )
        return report
