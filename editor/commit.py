"""Optimistischer Commit von Kandidaten mit Rollback und PendingSave.

Ablauf für einen Kandidaten:
  1. Vorprüfung (gesperrt oder bereits in Arbeit), Beginn aufs Raster setzen,
     danach auf "keine Änderung" prüfen
  2. Validierung lokal + Server
  3a. Verletzungen → PendingSave, Terminliste bleibt unverändert
  3b. sauber → Termin sofort lokal verschieben, dann speichern;
      bei Fehler zurück auf den Stand vor dem Kandidaten
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from analysis.conflict_validator import ConflictValidator
from data.services import ScheduleService, ServiceError
from editor.notifications import NotificationCenter
from editor.requests import CancellationToken, RequestGenerations, RequestTicket
from editor.store import ScheduleStore
from models.clock import format_time
from models.placement import Candidate, PendingSave, ViolationReport
from models.schedule_entry import ScheduleEntry

logger = logging.getLogger(__name__)


class CommitStatus(str, Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    PENDING = "pending"
    REJECTED = "rejected"
    NOOP = "noop"
    DISCARDED = "discarded"


class CommitResult(BaseModel):
    """Ergebnis eines Commit-Versuchs."""

    status: CommitStatus
    entry_id: int
    entry: Optional[ScheduleEntry] = None     # Stand nach dem Versuch
    report: Optional[ViolationReport] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == CommitStatus.COMMITTED


class CommitManager:
    """Einziger Schreiber der Terminliste."""

    def __init__(
        self,
        store: ScheduleStore,
        schedules: ScheduleService,
        validator: ConflictValidator,
        notifications: Optional[NotificationCenter] = None,
        generations: Optional[RequestGenerations] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.store = store
        self.schedules = schedules
        self.validator = validator
        self.notifications = notifications or NotificationCenter()
        self.generations = generations or RequestGenerations()
        self.token = token or CancellationToken()
        self.pending_save: Optional[PendingSave] = None
        self._in_flight: set[int] = set()

    def is_in_flight(self, entry_id: int) -> bool:
        return entry_id in self._in_flight

    def dismiss(self) -> None:
        """Verwirft den blockierten Kandidaten."""
        if self.pending_save is not None:
            logger.info(f"PendingSave verworfen: {self.pending_save.candidate}")
        self.pending_save = None

    # ─── Ablauf ───

    async def submit(self, candidate: Candidate) -> CommitResult:
        """Prüft den Kandidaten und speichert ihn, wenn er sauber ist."""
        if self.token.cancelled:
            return CommitResult(status=CommitStatus.DISCARDED, entry_id=candidate.id,
                                message="Sitzung geschlossen")

        current = self.store.get(candidate.id)
        if current is None:
            logger.info(f"{candidate}: Termin nicht geladen")
            return CommitResult(status=CommitStatus.REJECTED, entry_id=candidate.id,
                                message="Termin nicht geladen")
        if current.is_locked:
            logger.info(f"{candidate}: Termin ist gesperrt")
            return CommitResult(status=CommitStatus.REJECTED, entry_id=candidate.id,
                                entry=current, message="Termin ist gesperrt")
        if self.is_in_flight(candidate.id):
            logger.info(f"{candidate}: Speichern läuft bereits, abgelehnt")
            return CommitResult(status=CommitStatus.REJECTED, entry_id=candidate.id,
                                entry=current, message="Speichern läuft bereits")

        start = self.validator.grid.snap_and_clamp(candidate.start_time)
        if start != candidate.start_time:
            logger.debug(f"{candidate}: Beginn auf Raster gesetzt ({format_time(start)})")
            candidate = candidate.model_copy(update={"start_time": start})
        if (current.day_of_week, current.start_time) == (candidate.day_of_week, candidate.start_time):
            return CommitResult(status=CommitStatus.NOOP, entry_id=candidate.id, entry=current)

        self._in_flight.add(candidate.id)
        ticket = self.generations.issue(candidate.id, self.token)
        try:
            report = await self.validator.validate(candidate, self.store.entries)
            if ticket.is_stale:
                logger.debug(f"{candidate}: veraltete Prüfantwort verworfen")
                return CommitResult(status=CommitStatus.DISCARDED, entry_id=candidate.id)

            if not report.is_clean:
                self.pending_save = PendingSave(
                    candidate=candidate,
                    entry=current.moved(candidate.day_of_week, candidate.start_time),
                    report=report,
                )
                return CommitResult(status=CommitStatus.PENDING, entry_id=candidate.id,
                                    entry=current, report=report, message=report.summary())

            self.pending_save = None
            return await self._perform_save(candidate, current, ticket, report)
        finally:
            self._in_flight.discard(candidate.id)

    async def _perform_save(
        self,
        candidate: Candidate,
        snapshot: ScheduleEntry,
        ticket: RequestTicket,
        report: ViolationReport,
    ) -> CommitResult:
        duration = self.validator.duration
        updated = snapshot.moved(candidate.day_of_week, candidate.start_time).model_copy(
            update={"end_time": candidate.start_time + duration}
        )
        self.store.apply(updated)
        try:
            await self.schedules.update_entry(
                candidate.id,
                start_time=format_time(candidate.start_time),
                end_time=format_time(candidate.start_time + duration),
                day_of_week=candidate.day_of_week,
            )
        except ServiceError as e:
            if ticket.is_stale:
                logger.debug(f"{candidate}: Fehler nach Abbruch ignoriert ({e})")
                return CommitResult(status=CommitStatus.DISCARDED, entry_id=candidate.id)
            self.store.restore(snapshot)
            logger.error(f"Speichern von {candidate} fehlgeschlagen, zurückgesetzt: {e}")
            self.notifications.error("Termin konnte nicht gespeichert werden")
            return CommitResult(status=CommitStatus.ROLLED_BACK, entry_id=candidate.id,
                                entry=snapshot, report=report, message=str(e))

        if ticket.is_stale:
            return CommitResult(status=CommitStatus.DISCARDED, entry_id=candidate.id)
        logger.info(f"{candidate} gespeichert")
        self.notifications.success("Termin gespeichert")
        return CommitResult(status=CommitStatus.COMMITTED, entry_id=candidate.id,
                            entry=updated, report=report)
