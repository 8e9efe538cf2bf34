"""Schutz vor veralteten Antworten: Abbruch-Token und Request-Generationen.

Jeder asynchrone Aufruf (Konfliktprüfung, Speichern, Neuladen der Liste)
bekommt ein Ticket. Kommt die Antwort an, wenn inzwischen eine neuere
Anfrage für denselben Schlüssel läuft oder die Sitzung geschlossen wurde,
wird sie verworfen.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Hashable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Wird beim Schließen der Sitzung gesetzt; danach keine Zustandsänderungen mehr."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            logger.debug("Sitzung abgebrochen, offene Antworten werden verworfen")
        self._cancelled = True


@dataclass(frozen=True)
class RequestTicket:
    key: Hashable
    generation: int
    generations: "RequestGenerations"
    token: CancellationToken

    @property
    def is_stale(self) -> bool:
        return self.token.cancelled or not self.generations.is_current(self.key, self.generation)


class RequestGenerations:
    """Monoton steigender Zähler pro Schlüssel (z.B. Termin-ID oder "entries")."""

    def __init__(self) -> None:
        self._current: dict[Hashable, int] = defaultdict(int)

    def next(self, key: Hashable) -> int:
        self._current[key] += 1
        return self._current[key]

    def current(self, key: Hashable) -> int:
        return self._current[key]

    def is_current(self, key: Hashable, generation: int) -> bool:
        return self._current[key] == generation

    def invalidate(self, key: Hashable) -> None:
        """Macht alle offenen Anfragen für key ungültig."""
        self._current[key] += 1

    def issue(self, key: Hashable, token: CancellationToken) -> RequestTicket:
        return RequestTicket(key=key, generation=self.next(key), generations=self, token=token)
