"""
Schedule Selection

Picks the schedule a display should be playing right now.

When several schedules are valid at once, the most recently started one
wins. The sort is stable, so schedules sharing a start_time keep the
order the store returned them in.
"""

from datetime import datetime, tzinfo

from led_manager.common.models import Schedule, weekday_name


def local_weekday(now: datetime, tz: tzinfo | None = None) -> str:
    """Weekday name of `now` as seen in `tz` (or `now`'s own zone)."""
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return weekday_name(now)


def select_active_schedule(
    schedules: list[Schedule],
    now: datetime,
    tz: tzinfo | None = None,
) -> Schedule | None:
    """
    Select the schedule that should be on screen at `now`.

    Args:
        schedules: Candidates in store order
        now: Current instant (timezone-aware)
        tz: Zone used to decide which weekday it is

    Returns:
        The winning schedule, or None if no schedule applies today
    """
    if not schedules:
        return None

    today = local_weekday(now, tz)
    candidates = sorted(
        (s for s in schedules if s.is_active and s.covers(now)),
        key=lambda s: s.start_time,
        reverse=True,
    )
    for schedule in candidates:
        if schedule.runs_on(today):
            return schedule
    return None
