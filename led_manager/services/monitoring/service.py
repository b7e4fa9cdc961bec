"""
Display Monitoring Service

Keeps each monitored display's recorded status current and keeps its
playing content aligned with its active schedule.

Every monitored display gets its own ScheduledLoop (default 30s). A tick:
1. Looks up the display's VNNOX terminal id
2. Asks VNNOX for the terminal status and stores online/offline
   (online also stamps last_seen)
3. When online, compares the playing content with the active schedule
   and publishes the scheduled content if they differ

Failures stay inside the tick: a missing display or a failed device call
is recorded as status "error", a failed reconciliation is only logged.
The next tick is the retry.
"""

import asyncio
from datetime import datetime, timezone, tzinfo
from functools import partial
from typing import Any, Awaitable, Callable

from led_manager.common.exceptions import (
    DisplayManagerError,
    NotFoundError,
    ReconciliationError,
    RemoteUnavailableError,
)
from led_manager.common.interfaces import DeviceClient, DisplayStore, ScheduleStore
from led_manager.common.logging_setup import (
    get_service_logger,
    log_publish,
    log_status_change,
)
from led_manager.common.models import Display, DisplayStatus
from led_manager.common.scheduler import SchedulerGroup

from .schedule_selector import select_active_schedule

logger = get_service_logger("monitoring")

DEFAULT_INTERVAL_S = 30.0
DEFAULT_CALL_TIMEOUT_S = 30.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def derive_status(response: Any) -> DisplayStatus:
    """online iff the call succeeded and the terminal reports online."""
    if response is not None and response.succeeded and response.data is not None:
        if response.data.online:
            return DisplayStatus.ONLINE
    return DisplayStatus.OFFLINE


class MonitoringService:
    """
    Per-display status polling and scheduled content reconciliation.

    One instance is built at process start and owns every monitoring
    loop; call shutdown() (or stop_all_monitoring()) at teardown.
    """

    def __init__(
        self,
        display_store: DisplayStore,
        schedule_store: ScheduleStore,
        device_client: DeviceClient,
        interval_s: float = DEFAULT_INTERVAL_S,
        call_timeout_s: float = DEFAULT_CALL_TIMEOUT_S,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo | None = timezone.utc,
    ):
        self.display_store = display_store
        self.schedule_store = schedule_store
        self.device_client = device_client
        self.interval_s = interval_s
        self.call_timeout_s = call_timeout_s
        self.tz = tz
        self._clock = clock
        self._loops = SchedulerGroup()

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    async def start_monitoring(self, display_id: str) -> None:
        """
        (Re)start monitoring a display.

        Any existing loop for the display is stopped before the new one is
        installed. The loop's first check runs right away and is awaited
        here; later checks never overlap it.
        """
        loop = self._loops.add(
            display_id,
            self.interval_s,
            partial(self.check_display_status, display_id),
            run_now=True,
        )
        logger.info(
            f"Monitoring started for display {display_id} (interval: {self.interval_s}s)",
            extra={"display_id": display_id},
        )
        await loop.drain()

    def stop_monitoring(self, display_id: str) -> bool:
        """Stop monitoring a display. Returns False if it wasn't monitored."""
        stopped = self._loops.remove(display_id)
        if stopped:
            logger.info(
                f"Monitoring stopped for display {display_id}",
                extra={"display_id": display_id},
            )
        return stopped

    async def start_user_display_monitoring(self, user_id: str) -> list[str]:
        """Start monitoring every display owned by `user_id`."""
        try:
            displays = await self.display_store.list_by_user(user_id)
        except DisplayManagerError as e:
            logger.error(
                f"Failed to start monitoring for user {user_id}: {e}",
                extra={"user_id": user_id},
            )
            return []

        display_ids = [display.id for display in displays]
        await asyncio.gather(*(self.start_monitoring(d) for d in display_ids))
        return display_ids

    def stop_all_monitoring(self) -> int:
        """Stop every monitoring loop. Returns how many were running."""
        stopped = self._loops.stop_all()
        if stopped:
            logger.info(f"Stopped monitoring {len(stopped)} displays")
        return len(stopped)

    async def shutdown(self) -> None:
        """Stop all loops and wait for ticks already in flight."""
        loops = self._loops.stop_all()
        await asyncio.gather(*(loop.drain() for loop in loops))
        logger.info(f"Monitoring shut down ({len(loops)} displays)")

    def is_monitoring(self, display_id: str) -> bool:
        return display_id in self._loops

    def monitored_displays(self) -> list[str]:
        return self._loops.names()

    def get_stats(self, display_ids: list[str] | None = None) -> dict:
        stats = self._loops.get_stats()
        if display_ids is not None:
            wanted = set(display_ids)
            stats = {k: v for k, v in stats.items() if k in wanted}
        return stats

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def check_display_status(self, display_id: str) -> DisplayStatus:
        """
        One monitoring tick for a display.

        Never raises; the returned status is the one written to the store.
        """
        try:
            display = await self.display_store.get(display_id)
        except NotFoundError as e:
            logger.warning(e.message, extra={"display_id": display_id})
            return await self._mark_error(display_id)
        except Exception as e:
            logger.error(
                f"Failed to load display {display_id}: {e}",
                extra={"display_id": display_id},
            )
            return await self._mark_error(display_id)

        try:
            response = await self._call(
                self.device_client.get_status(display.terminal_id),
                display.terminal_id,
            )
        except Exception as e:
            logger.error(
                f"Failed to update display status for {display_id}: {e}",
                extra={"display_id": display_id, "terminal_id": display.terminal_id},
            )
            return await self._mark_error(display_id)

        status = derive_status(response)
        try:
            if status == DisplayStatus.ONLINE:
                await self.display_store.set_status(display_id, status, last_seen=self._clock())
            else:
                await self.display_store.set_status(display_id, status)
        except Exception as e:
            logger.error(
                f"Failed to store status {status.value} for display {display_id}: {e}",
                extra={"display_id": display_id, "status": status.value},
            )
            return await self._mark_error(display_id)

        log_status_change(logger, display_id, display.status.value, status.value)

        if status == DisplayStatus.ONLINE:
            try:
                await self.reconcile_content(display)
            except Exception as e:
                error = e if isinstance(e, ReconciliationError) else ReconciliationError(
                    str(e) or type(e).__name__, display_id=display_id
                )
                logger.error(
                    f"Failed to check scheduled content for display {display_id}: {error}",
                    extra={"display_id": display_id, "content_id": error.content_id},
                )

        return status

    async def reconcile_content(self, display: Display) -> str | None:
        """
        Publish the scheduled content if the terminal is playing something else.

        Returns:
            The published content id, or None when nothing had to change
        """
        now = self._clock()
        schedules = await self.schedule_store.get_active_schedules(display.id, now)
        if not schedules:
            return None

        schedule = select_active_schedule(schedules, now, self.tz)
        if schedule is None:
            return None

        playing = await self._call(
            self.device_client.get_playing_content(display.terminal_id),
            display.terminal_id,
        )
        current = playing.data.content_id if playing.data is not None else None
        if current == schedule.content_id:
            return None

        result = await self._call(
            self.device_client.publish_content(display.terminal_id, schedule.content_id),
            display.terminal_id,
        )
        if not result.succeeded:
            log_publish(logger, display.id, schedule.content_id, current, success=False)
            raise ReconciliationError(
                f"publish rejected (code {result.code}: {result.message})",
                display_id=display.id,
                content_id=schedule.content_id,
            )

        log_publish(logger, display.id, schedule.content_id, current)
        return schedule.content_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call(self, call: Awaitable[Any], terminal_id: str) -> Any:
        """Await a device call with the per-call timeout."""
        try:
            return await asyncio.wait_for(call, timeout=self.call_timeout_s)
        except asyncio.TimeoutError as e:
            raise RemoteUnavailableError(
                f"no answer within {self.call_timeout_s}s", terminal_id
            ) from e

    async def _mark_error(self, display_id: str) -> DisplayStatus:
        try:
            await self.display_store.set_status(display_id, DisplayStatus.ERROR)
        except Exception as e:
            logger.error(
                f"Failed to mark display {display_id} as error: {e}",
                extra={"display_id": display_id},
            )
        return DisplayStatus.ERROR
