"""
Collaborator Interfaces

Structural types for the three collaborators the monitoring loop talks
to. The Supabase stores and the VNNOX client satisfy them; tests use
in-memory fakes.
"""

from datetime import datetime
from typing import Any, Protocol

from .models import Display, DisplayStatus, Schedule


class DisplayStore(Protocol):
    async def get(self, display_id: str) -> Display:
        """Return the display or raise NotFoundError."""
        ...

    async def set_status(
        self,
        display_id: str,
        status: DisplayStatus,
        last_seen: datetime | None = None,
    ) -> None:
        ...

    async def list_by_user(self, user_id: str) -> list[Display]:
        ...


class ScheduleStore(Protocol):
    async def get_active_schedules(self, display_id: str, now: datetime) -> list[Schedule]:
        """Active schedules whose window contains `now`, in store order."""
        ...


class DeviceClient(Protocol):
    # Return types are the contracts in services.vnnox.responses
    async def get_status(self, terminal_id: str) -> Any:
        ...

    async def get_playing_content(self, terminal_id: str) -> Any:
        ...

    async def publish_content(self, terminal_id: str, content_id: str) -> Any:
        ...
