"""Lane-Zuweisung: greedy Intervall-Partitionierung pro Tag.

Überlappende Termine eines Tages bekommen unterschiedliche Lanes, damit die
Oberfläche sie versetzt oder nebeneinander zeichnen kann. Halboffene
Intervalle [start, end): ein Termin, der genau endet, wenn ein anderer
beginnt, überlappt nicht.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable, Sequence

from models.schedule_entry import ScheduleEntry


@dataclass(frozen=True)
class Interval:
    """Ein Zeitintervall mit beliebigem Schlüssel (meist die Termin-ID)."""

    key: Hashable
    start: int
    end: int

    @property
    def sort_length(self) -> int:
        # Länge 0 zählt für die Sortierung als 1 Minute
        return max(1, self.end - self.start)


@dataclass(frozen=True)
class LanedInterval:
    key: Hashable
    start: int
    end: int
    lane: int


@dataclass(frozen=True)
class LaneLayout:
    """Ergebnis der Lane-Zuweisung eines Tages."""

    items: list[LanedInterval]
    lane_count: int

    def lane_of(self, key: Hashable) -> int:
        for item in self.items:
            if item.key == key:
                return item.lane
        raise KeyError(key)

    def as_dict(self) -> dict:
        return {item.key: item.lane for item in self.items}


def assign_lanes(intervals: Iterable[Interval]) -> LaneLayout:
    """Weist jedem Intervall die erste freie Lane zu.

    Sortierung: Beginn aufsteigend, bei gleichem Beginn längere zuerst.
    Die Sortierung ist stabil, gleiche Intervalle behalten ihre
    Eingabereihenfolge und bekommen verschiedene Lanes.

    lane_count ist 1 + höchster Lane-Index (mindestens 1, auch für leere Tage).
    """
    ordered = sorted(intervals, key=lambda iv: (iv.start, -iv.sort_length))
    lanes_end: list[int] = []
    items: list[LanedInterval] = []

    for iv in ordered:
        lane = -1
        for i, lane_end in enumerate(lanes_end):
            if lane_end <= iv.start:
                lane = i
                break
        if lane == -1:
            lane = len(lanes_end)
            lanes_end.append(iv.end)
        else:
            lanes_end[lane] = max(lanes_end[lane], iv.end)
        items.append(LanedInterval(key=iv.key, start=iv.start, end=iv.end, lane=lane))

    return LaneLayout(items=items, lane_count=max(1, len(lanes_end)))


def compute_lanes(entries: Sequence[ScheduleEntry], duration: int) -> LaneLayout:
    """Lanes für die Termine eines Tages mit fester Termindauer."""
    return assign_lanes(
        Interval(key=e.id, start=e.start_time, end=e.start_time + duration)
        for e in entries
    )
