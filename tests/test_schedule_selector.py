"""
Tests for choosing the schedule a display should be playing.
"""

from datetime import timedelta
from zoneinfo import ZoneInfo

from led_manager.services.monitoring import local_weekday, select_active_schedule

from .fakes import MONDAY_NOON, make_schedule


def test_no_schedules_selects_nothing():
    assert select_active_schedule([], MONDAY_NOON) is None


def test_equal_start_times_keep_store_order():
    """Every-day A listed before Monday-only B: A wins on a Monday."""
    start = MONDAY_NOON - timedelta(hours=1)
    schedules = [
        make_schedule("A", repeat_days=set(), start=start),
        make_schedule("B", repeat_days={"monday"}, start=start),
    ]
    assert select_active_schedule(schedules, MONDAY_NOON).content_id == "A"


def test_most_recently_started_schedule_wins():
    schedules = [
        make_schedule("A", start=MONDAY_NOON - timedelta(hours=4)),
        make_schedule("B", repeat_days={"monday"}, start=MONDAY_NOON - timedelta(hours=1)),
    ]
    assert select_active_schedule(schedules, MONDAY_NOON).content_id == "B"


def test_schedule_for_other_days_is_skipped():
    schedules = [
        make_schedule("A", repeat_days={"tuesday"}, start=MONDAY_NOON - timedelta(hours=1)),
        make_schedule("B", repeat_days={"monday", "friday"}, start=MONDAY_NOON - timedelta(hours=3)),
    ]
    assert select_active_schedule(schedules, MONDAY_NOON).content_id == "B"


def test_no_schedule_runs_today():
    schedules = [
        make_schedule("A", repeat_days={"saturday"}),
        make_schedule("B", repeat_days={"sunday"}),
    ]
    assert select_active_schedule(schedules, MONDAY_NOON) is None


def test_inactive_and_expired_schedules_are_ignored():
    inactive = make_schedule("A", start=MONDAY_NOON - timedelta(minutes=5))
    inactive.is_active = False
    expired = make_schedule(
        "B",
        start=MONDAY_NOON - timedelta(minutes=10),
        end=MONDAY_NOON - timedelta(minutes=1),
    )
    future = make_schedule("C", start=MONDAY_NOON + timedelta(hours=1))
    current = make_schedule("D", start=MONDAY_NOON - timedelta(days=1), end=MONDAY_NOON)

    selected = select_active_schedule([inactive, expired, future, current], MONDAY_NOON)
    assert selected.content_id == "D"


def test_weekday_is_taken_in_schedule_timezone():
    # 02:00 UTC Monday is still Sunday evening in Los Angeles
    early_monday_utc = MONDAY_NOON.replace(hour=2)
    la = ZoneInfo("America/Los_Angeles")
    assert local_weekday(early_monday_utc) == "monday"
    assert local_weekday(early_monday_utc, la) == "sunday"

    schedules = [
        make_schedule("MON", repeat_days={"monday"}, start=early_monday_utc - timedelta(days=2)),
        make_schedule("SUN", repeat_days={"sunday"}, start=early_monday_utc - timedelta(days=3)),
    ]
    assert select_active_schedule(schedules, early_monday_utc).content_id == "MON"
    assert select_active_schedule(schedules, early_monday_utc, la).content_id == "SUN"
