"""Umrechnung zwischen "HH:MM"-Strings und Minuten seit Mitternacht."""

import logging
from typing import Union

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def parse_time(value: Union[str, int, None]) -> int:
    """Wandelt "HH:MM" (oder "HH:MM:SS") in Minuten seit Mitternacht um.

    Nicht lesbare Werte ergeben 00:00, damit das Raster darstellbar bleibt.
    Ganzzahlen werden als bereits umgerechnete Minuten übernommen.
    """
    if isinstance(value, bool):
        value = None
    if isinstance(value, int):
        return value
    if not value:
        return 0
    parts = str(value).strip().split(":")
    try:
        hh = int(parts[0] or 0)
        mm = int(parts[1] or 0) if len(parts) > 1 else 0
    except ValueError:
        logger.warning(f"Ungültige Uhrzeit {value!r}, verwende 00:00")
        return 0
    if hh < 0 or mm < 0 or mm >= 60:
        logger.warning(f"Ungültige Uhrzeit {value!r}, verwende 00:00")
        return 0
    return hh * 60 + mm


def format_time(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM" (z.B. 605 → "10:05")."""
    minutes = max(0, int(minutes))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_hour(value: Union[str, int, None], default: int) -> int:
    """Liest die Stunde aus "HH:MM" bzw. einer Zahl (für start_hour/end_hour)."""
    if value is None or value == "":
        return default
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).split(":")[0])
    except ValueError:
        logger.warning(f"Ungültige Stunde {value!r}, verwende {default}")
        return default
