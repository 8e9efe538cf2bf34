"""REST-Client für das Stundenplan-Backend (httpx, async).

Implementiert ScheduleService, ConflictService und SettingsProvider.
Alle Transportfehler und HTTP-Fehlerstatus werden als ServiceError gemeldet.
"""

import logging
from typing import Any, Optional

import httpx

from config.schema import ApiConfig
from data.services import ServiceError
from models.schedule_entry import ConflictEntry, ScheduleEntry
from models.timetable_settings import TimetableSettings

logger = logging.getLogger(__name__)


def _unwrap_list(payload: Any) -> list:
    """Listenantworten kommen paginiert ({"results": [...]}), verpackt ({"data": ...}) oder roh."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if isinstance(payload.get("results"), list):
            return payload["results"]
        data = payload.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return _unwrap_list(data)
    return []


class TimetableApiClient:
    """Async-Client für Termine, Konfliktprüfung und Einstellungen.

    Kann als async Context-Manager verwendet werden; ein übergebener
    httpx.AsyncClient (z.B. mit MockTransport in Tests) wird nicht
    geschlossen.
    """

    def __init__(self, config: ApiConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._owns_client = client is None
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        if client is None:
            client = httpx.AsyncClient(
                base_url=config.base_url,
                timeout=config.timeout_seconds,
                headers=headers,
            )
        else:
            client.headers.update(headers)
        self._client = client

    async def __aenter__(self) -> "TimetableApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ─── Transport ───

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ServiceError(
                f"{method} {url} fehlgeschlagen: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {url} fehlgeschlagen: {e}") from e
        if not response.content:
            return None
        return response.json()

    # ─── SettingsProvider ───

    async def get_settings(self, timetable_id: int) -> Optional[TimetableSettings]:
        payload = await self._request(
            "GET", self.config.settings_path, params={"timetable": timetable_id}
        )
        if isinstance(payload, dict) and "slot_duration_minutes" in payload:
            return TimetableSettings.model_validate(payload)
        items = _unwrap_list(payload)
        if not items:
            logger.info(f"Keine Einstellungen für Stundenplan {timetable_id}")
            return None
        return TimetableSettings.model_validate(items[0])

    # ─── ScheduleService ───

    async def list_entries(self, filters: dict[str, Any]) -> list[ScheduleEntry]:
        params = {"page_size": self.config.page_size}
        params.update({k: v for k, v in filters.items() if v is not None})
        payload = await self._request("GET", self.config.schedules_path, params=params)
        entries = [ScheduleEntry.model_validate(item) for item in _unwrap_list(payload)]
        logger.debug(f"{len(entries)} Termine geladen ({filters})")
        return entries

    async def update_entry(
        self, entry_id: int, start_time: str, end_time: str, day_of_week: str
    ) -> ScheduleEntry:
        payload = await self._request(
            "PATCH",
            f"{self.config.schedules_path}{entry_id}/",
            json={
                "start_time": start_time,
                "end_time": end_time,
                "day_of_week": day_of_week,
            },
        )
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            raise ServiceError(f"Unerwartete Antwort beim Speichern von Termin {entry_id}")
        return ScheduleEntry.model_validate(payload)

    # ─── ConflictService ───

    async def check_conflicts(
        self,
        timetable_id: int,
        day_index: int,
        start_time: str,
        end_time: str,
        exclude_id: Optional[int] = None,
    ) -> list[ConflictEntry]:
        params: dict[str, Any] = {
            "timetable": timetable_id,
            "day": day_index,
            "start_time": start_time,
            "end_time": end_time,
        }
        if exclude_id is not None:
            params["exclude_id"] = exclude_id
        payload = await self._request("GET", self.config.conflicts_path, params=params)
        raw = payload.get("conflicts", []) if isinstance(payload, dict) else _unwrap_list(payload)
        return [ConflictEntry.model_validate(item) for item in raw or []]
