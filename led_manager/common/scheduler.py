"""
Interval Scheduler

Provides ScheduledLoop, which fires an async callback every `interval`
seconds, and SchedulerGroup, which owns at most one loop per key.

Unlike a bare `while True: await asyncio.sleep(interval)` loop, this
scheduler:
- Schedules relative to the original timeline, so slow callbacks don't drift
- Skips missed intervals instead of queueing them up
- Lets a callback that is already running finish after stop()
- Reports execution metrics for observability

Usage:
    async def check():
        ...

    loop = ScheduledLoop(30.0, check, name="display-1")
    loop.start()

    # Later:
    loop.stop()
"""

import asyncio
import time
from typing import Awaitable, Callable

from .logging_setup import get_service_logger

logger = get_service_logger("scheduler")


class ScheduledLoop:
    """
    Fixed-interval scheduler for one async callback.

    The first run happens one interval after start(), or right away with
    start(run_now=True). Callbacks run
    sequentially: a tick never overlaps the previous one. Errors raised by
    the callback are logged and the loop keeps going.

    Attributes:
        interval: The interval in seconds between executions
        callback: Async function to call each interval
        skipped_count: Number of intervals skipped (to catch up)
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], Awaitable[None]],
        name: str = "unnamed",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval = interval_seconds
        self.callback = callback
        self.name = name

        self._next_run: float = 0
        self._running = False
        self._task: asyncio.Task | None = None
        self._inflight: asyncio.Future | None = None
        self._pending: asyncio.Future | None = None
        self._tick_started: float = 0

        # Observability metrics
        self._execution_count: int = 0
        self._error_count: int = 0
        self._skipped_count: int = 0
        self._last_execution_time: float = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self, run_now: bool = False) -> None:
        """
        Start the scheduled loop in a background task.

        With run_now the first tick fires immediately and is the loop's own
        first tick, so the next one waits for it; drain() awaits it.
        """
        if self._running:
            return

        self._running = True
        self._next_run = time.monotonic()
        if run_now:
            self._pending = self._fire()
        else:
            self._next_run += self.interval
        self._task = asyncio.create_task(self._run(), name=f"scheduled-loop:{self.name}")

    def stop(self) -> None:
        """
        Stop the scheduled loop.

        No further tick fires once this returns. A tick that is already
        executing is left to complete.
        """
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def drain(self) -> None:
        """Wait for an in-flight tick (if any) to finish."""
        tick = self._inflight
        if tick is not None and not tick.done():
            await asyncio.wait({tick})

    def _fire(self) -> asyncio.Future:
        self._tick_started = time.monotonic()
        tick = asyncio.ensure_future(self.callback())
        tick.add_done_callback(self._on_tick_done)
        self._inflight = tick
        return tick

    async def _run(self) -> None:
        """Main loop that fires callback at fixed intervals."""
        while self._running:
            tick, self._pending = self._pending, None
            if tick is None:
                sleep_duration = self._next_run - time.monotonic()
                if sleep_duration > 0:
                    try:
                        await asyncio.sleep(sleep_duration)
                    except asyncio.CancelledError:
                        break

                if not self._running:
                    break

                tick = self._fire()

            try:
                # Shielded: stop() cancels the loop, never the tick itself
                await asyncio.shield(tick)
            except asyncio.CancelledError:
                break
            except Exception:
                # Already logged by _on_tick_done
                pass
            self._last_execution_time = time.monotonic() - self._tick_started

            # Skip missed intervals to catch up (don't queue up missed executions)
            now = time.monotonic()
            skipped = 0
            while self._next_run <= now:
                self._next_run += self.interval
                skipped += 1

            # First skip is expected (the one we just executed)
            if skipped > 1:
                self._skipped_count += skipped - 1
                logger.warning(
                    f"Scheduler '{self.name}' skipped {skipped - 1} intervals "
                    f"(execution took {self._last_execution_time:.3f}s)"
                )

    def _on_tick_done(self, tick: asyncio.Future) -> None:
        if self._inflight is tick:
            self._inflight = None
        if tick.cancelled():
            return
        error = tick.exception()
        if error is not None:
            self._error_count += 1
            logger.error(f"Scheduled callback '{self.name}' error: {error}")
        else:
            self._execution_count += 1

    @property
    def skipped_count(self) -> int:
        """Number of intervals skipped to catch up."""
        return self._skipped_count

    @property
    def execution_count(self) -> int:
        """Total number of successful executions."""
        return self._execution_count

    @property
    def last_execution_time(self) -> float:
        """Duration of last callback execution in seconds."""
        return self._last_execution_time

    def get_stats(self) -> dict:
        """Get scheduler statistics for observability."""
        return {
            "name": self.name,
            "interval_s": self.interval,
            "running": self._running,
            "execution_count": self._execution_count,
            "error_count": self._error_count,
            "skipped_count": self._skipped_count,
            "last_execution_s": round(self._last_execution_time, 3),
        }


class SchedulerGroup:
    """
    Keyed set of scheduled loops with at most one loop per key.

    All mutations are synchronous (no await between removing the old loop
    and installing the new one), so concurrent add/remove calls for one key
    on the event loop can never leave two loops running.
    """

    def __init__(self):
        self._schedulers: dict[str, ScheduledLoop] = {}

    def add(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], Awaitable[None]],
        run_now: bool = False,
    ) -> ScheduledLoop:
        """Replace any loop registered under `name` with a new, started one."""
        self.remove(name)
        scheduler = ScheduledLoop(interval_seconds, callback, name)
        self._schedulers[name] = scheduler
        scheduler.start(run_now=run_now)
        return scheduler

    def remove(self, name: str) -> bool:
        """Stop and forget the loop for `name`. Returns False if none existed."""
        scheduler = self._schedulers.pop(name, None)
        if scheduler is None:
            return False
        scheduler.stop()
        return True

    def stop_all(self) -> list[ScheduledLoop]:
        """Stop every loop and clear the group. Returns the stopped loops."""
        stopped = list(self._schedulers.values())
        self._schedulers.clear()
        for scheduler in stopped:
            scheduler.stop()
        return stopped

    def get_stats(self) -> dict:
        """Get aggregated statistics for all schedulers."""
        return {
            name: scheduler.get_stats()
            for name, scheduler in self._schedulers.items()
        }

    def get(self, name: str) -> ScheduledLoop | None:
        """Get a specific scheduler by name."""
        return self._schedulers.get(name)

    def names(self) -> list[str]:
        return list(self._schedulers)

    def __contains__(self, name: str) -> bool:
        return name in self._schedulers

    def __len__(self) -> int:
        return len(self._schedulers)
