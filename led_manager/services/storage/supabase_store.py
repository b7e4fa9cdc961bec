"""
Supabase Stores

DisplayStore and ScheduleStore backed by Supabase tables, accessed
through the PostgREST API with a service-role key.

Tables:
- displays: id, user_id, display_name, vnnox_terminal_id, status, last_seen
- content_schedules: id, display_id, content_type, content_id,
  start_time, end_time, repeat_days, is_active
"""

from datetime import datetime
from typing import Any

import httpx

from led_manager.common.config import Settings
from led_manager.common.exceptions import NotFoundError, StoreError
from led_manager.common.logging_setup import get_service_logger
from led_manager.common.models import (
    Display,
    DisplayStatus,
    Schedule,
    load_display,
    load_schedule,
)

logger = get_service_logger("storage")

DISPLAY_COLUMNS = "id,user_id,display_name,vnnox_terminal_id,location,status,last_seen"


class SupabaseRest:
    """Shared PostgREST connection used by both stores"""

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.supabase_url = supabase_url.rstrip("/")
        self.supabase_key = supabase_key
        self.timeout = timeout
        self._transport = transport
        # Reusable HTTP client - avoids connection overhead per request
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseRest":
        settings.require_supabase()
        return cls(settings.supabase_url, settings.supabase_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {self.supabase_key}",
            "Content-Type": "application/json",
        }

    async def select(self, table: str, params: Any) -> list[dict]:
        client = await self._get_client()
        try:
            response = await client.get(
                f"{self.supabase_url}/rest/v1/{table}",
                params=params,
                headers=self._headers(),
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise StoreError(f"select from {table} failed: {e}", operation="select") from e

    async def update(self, table: str, params: dict[str, str], values: dict[str, Any]) -> None:
        client = await self._get_client()
        try:
            response = await client.patch(
                f"{self.supabase_url}/rest/v1/{table}",
                params=params,
                json=values,
                headers={**self._headers(), "Prefer": "return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"update of {table} failed: {e}", operation="update") from e


class SupabaseDisplayStore:
    """Display rows in the `displays` table"""

    def __init__(self, rest: SupabaseRest):
        self.rest = rest

    async def get(self, display_id: str) -> Display:
        rows = await self.rest.select(
            "displays",
            {"id": f"eq.{display_id}", "select": DISPLAY_COLUMNS},
        )
        if not rows:
            raise NotFoundError("display", display_id)
        try:
            return load_display(rows[0])
        except (KeyError, ValueError) as e:
            raise StoreError(f"malformed display row {display_id}: {e}", operation="select") from e

    async def set_status(
        self,
        display_id: str,
        status: DisplayStatus,
        last_seen: datetime | None = None,
    ) -> None:
        values: dict[str, Any] = {"status": DisplayStatus(status).value}
        if last_seen is not None:
            values["last_seen"] = last_seen.isoformat()
        await self.rest.update("displays", {"id": f"eq.{display_id}"}, values)

    async def list_by_user(self, user_id: str) -> list[Display]:
        rows = await self.rest.select(
            "displays",
            {"user_id": f"eq.{user_id}", "select": DISPLAY_COLUMNS, "order": "created_at.asc"},
        )
        displays = []
        for row in rows:
            try:
                displays.append(load_display(row))
            except (KeyError, ValueError) as e:
                logger.warning(
                    f"Skipping malformed display row {row.get('id')}: {e}",
                    extra={"user_id": user_id},
                )
        return displays


class SupabaseScheduleStore:
    """Schedule rows in the `content_schedules` table"""

    def __init__(self, rest: SupabaseRest):
        self.rest = rest

    async def get_active_schedules(self, display_id: str, now: datetime) -> list[Schedule]:
        """
        Active schedules whose window contains `now`.

        Rows come back ordered by start_time ascending.
        """
        now_iso = now.isoformat()
        rows = await self.rest.select(
            "content_schedules",
            [
                ("select", "*"),
                ("display_id", f"eq.{display_id}"),
                ("is_active", "eq.true"),
                ("start_time", f"lte.{now_iso}"),
                ("or", f"(end_time.is.null,end_time.gte.{now_iso})"),
                ("order", "start_time.asc"),
            ],
        )

        schedules = []
        for row in rows:
            try:
                schedules.append(load_schedule(row))
            except (KeyError, ValueError) as e:
                logger.warning(
                    f"Skipping malformed schedule row {row.get('id')}: {e}",
                    extra={"display_id": display_id},
                )
        return schedules
