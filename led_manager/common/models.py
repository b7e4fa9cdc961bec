"""
Domain Dataclasses

Typed shapes for rows read from the `displays` and
`content_schedules` tables.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# PostgREST trims trailing zeros from fractional seconds (".12345");
# datetime.fromisoformat before 3.11 only takes 3 or 6 digits
_FRACTION = re.compile(r"\.(\d+)")

# Locale-independent, indexed by datetime.weekday()
WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class DisplayStatus(str, Enum):
    """Display status values - must match the displays.status check constraint"""
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


class ContentType(str, Enum):
    """Kind of content a schedule points at"""
    MEDIA = "media"
    TEMPLATE = "template"


@dataclass
class Display:
    """LED display bound to a VNNOX terminal"""
    id: str
    terminal_id: str
    status: DisplayStatus = DisplayStatus.OFFLINE
    last_seen: datetime | None = None
    user_id: str | None = None
    name: str = ""
    location: str | None = None


@dataclass
class Schedule:
    """Content schedule for one display"""
    id: str
    display_id: str
    content_id: str
    start_time: datetime
    end_time: datetime | None = None
    repeat_days: set[str] = field(default_factory=set)  # empty = every day
    is_active: bool = True
    content_type: ContentType = ContentType.MEDIA

    def runs_on(self, weekday: str) -> bool:
        """True if the schedule repeats on `weekday` (or on every day)."""
        return not self.repeat_days or weekday in self.repeat_days

    def covers(self, now: datetime) -> bool:
        """True if `now` falls inside the schedule's time window."""
        if self.start_time > now:
            return False
        return self.end_time is None or self.end_time >= now


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp from PostgREST; naive values are taken as UTC."""
    if not value:
        return None
    ts_clean = _FRACTION.sub(_six_digit_fraction, value.replace("Z", "+00:00"), count=1)
    ts = datetime.fromisoformat(ts_clean)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def weekday_name(now: datetime) -> str:
    """English lowercase weekday name for `now`."""
    return WEEKDAYS[now.weekday()]


# Helper functions to load models from PostgREST rows
def load_display(row: dict[str, Any]) -> Display:
    """Load Display from a `displays` row"""
    return Display(
        id=row["id"],
        terminal_id=row.get("vnnox_terminal_id") or "",
        status=DisplayStatus(row.get("status") or "offline"),
        last_seen=parse_timestamp(row.get("last_seen")),
        user_id=row.get("user_id"),
        name=row.get("display_name") or "",
        location=row.get("location"),
    )


def load_schedule(row: dict[str, Any]) -> Schedule:
    """Load Schedule from a `content_schedules` row"""
    return Schedule(
        id=row["id"],
        display_id=row["display_id"],
        content_id=row["content_id"],
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row.get("end_time")),
        repeat_days={d.lower() for d in row.get("repeat_days") or []},
        is_active=row.get("is_active", True),
        content_type=ContentType(row.get("content_type") or "media"),
    )
