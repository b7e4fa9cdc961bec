"""
Tests for the Supabase (PostgREST) display and schedule stores.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from led_manager.common.exceptions import NotFoundError, StoreError
from led_manager.common.models import DisplayStatus, parse_timestamp
from led_manager.services.monitoring import MonitoringService
from led_manager.services.storage import (
    SupabaseDisplayStore,
    SupabaseRest,
    SupabaseScheduleStore,
)

from .fakes import MONDAY_NOON, FakeDeviceClient, FakeScheduleStore

DISPLAY_ROW = {
    "id": "d1",
    "user_id": "u1",
    "display_name": "Lobby wall",
    "vnnox_terminal_id": "T-1",
    "location": "HQ",
    "status": "online",
    "last_seen": "2026-10-19T11:59:30.123456+00:00",
}


def make_rest(handler) -> SupabaseRest:
    return SupabaseRest(
        "https://project.supabase.test",
        "service-key",
        transport=httpx.MockTransport(handler),
    )


async def test_get_display():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[DISPLAY_ROW])

    display = await SupabaseDisplayStore(make_rest(handler)).get("d1")

    assert display.terminal_id == "T-1"
    assert display.status == DisplayStatus.ONLINE
    assert display.last_seen == datetime(2026, 10, 19, 11, 59, 30, 123456, tzinfo=timezone.utc)
    assert requests[0].url.path == "/rest/v1/displays"
    assert requests[0].url.params["id"] == "eq.d1"
    assert requests[0].headers["apikey"] == "service-key"


async def test_get_missing_display_raises_not_found():
    store = SupabaseDisplayStore(make_rest(lambda request: httpx.Response(200, json=[])))

    with pytest.raises(NotFoundError):
        await store.get("gone")


async def test_set_status_without_last_seen():
    bodies = []

    def handler(request):
        bodies.append((request.method, request.url.params["id"], json.loads(request.content)))
        return httpx.Response(204)

    await SupabaseDisplayStore(make_rest(handler)).set_status("d1", DisplayStatus.OFFLINE)

    assert bodies == [("PATCH", "eq.d1", {"status": "offline"})]


async def test_set_status_with_last_seen():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    await SupabaseDisplayStore(make_rest(handler)).set_status(
        "d1", DisplayStatus.ONLINE, last_seen=MONDAY_NOON
    )

    assert bodies == [{"status": "online", "last_seen": MONDAY_NOON.isoformat()}]


async def test_list_by_user():
    def handler(request):
        assert request.url.params["user_id"] == "eq.u1"
        return httpx.Response(200, json=[DISPLAY_ROW, {**DISPLAY_ROW, "id": "d2", "last_seen": None}])

    displays = await SupabaseDisplayStore(make_rest(handler)).list_by_user("u1")

    assert [d.id for d in displays] == ["d1", "d2"]
    assert displays[1].last_seen is None


async def test_active_schedules_query_and_parsing():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[
            {
                "id": "s1",
                "display_id": "d1",
                "content_type": "template",
                "content_id": "tpl-1",
                "start_time": "2026-10-19T08:00:00Z",
                "end_time": None,
                "repeat_days": ["Monday", "friday"],
                "is_active": True,
            },
            {"id": "broken", "display_id": "d1"},
        ])

    schedules = await SupabaseScheduleStore(make_rest(handler)).get_active_schedules("d1", MONDAY_NOON)

    params = requests[0].url.params
    assert params["display_id"] == "eq.d1"
    assert params["is_active"] == "eq.true"
    assert params["start_time"] == f"lte.{MONDAY_NOON.isoformat()}"
    assert params["or"] == f"(end_time.is.null,end_time.gte.{MONDAY_NOON.isoformat()})"
    assert params["order"] == "start_time.asc"

    # Malformed row is skipped
    assert len(schedules) == 1
    assert schedules[0].repeat_days == {"monday", "friday"}
    assert schedules[0].end_time is None
    assert schedules[0].runs_on("monday")


async def test_http_error_raises_store_error():
    store = SupabaseDisplayStore(make_rest(lambda request: httpx.Response(500, json={"message": "down"})))

    with pytest.raises(StoreError):
        await store.set_status("d1", DisplayStatus.ERROR)


def test_trimmed_fraction_is_parsed():
    # Postgres drops trailing zeros: .123450 comes back as .12345
    assert parse_timestamp("2026-10-19T11:59:30.12345+00:00") == datetime(
        2026, 10, 19, 11, 59, 30, 123450, tzinfo=timezone.utc
    )
    assert parse_timestamp("2026-10-19T11:59:30.1Z") == datetime(
        2026, 10, 19, 11, 59, 30, 100000, tzinfo=timezone.utc
    )
    assert parse_timestamp("2026-10-19T11:59:30.1234567+00:00").microsecond == 123456


async def test_get_display_with_trimmed_last_seen():
    row = {**DISPLAY_ROW, "last_seen": "2026-10-19T11:59:30.12345+00:00"}
    store = SupabaseDisplayStore(make_rest(lambda request: httpx.Response(200, json=[row])))

    display = await store.get("d1")

    assert display.last_seen == datetime(2026, 10, 19, 11, 59, 30, 123450, tzinfo=timezone.utc)


async def test_online_display_with_trimmed_last_seen_stays_online():
    row = {**DISPLAY_ROW, "last_seen": "2026-10-19T11:59:30.12345+00:00"}
    patches = []

    def handler(request):
        if request.method == "PATCH":
            patches.append(json.loads(request.content)["status"])
            return httpx.Response(204)
        return httpx.Response(200, json=[row])

    device = FakeDeviceClient()
    device.online["T-1"] = True
    service = MonitoringService(
        SupabaseDisplayStore(make_rest(handler)),
        FakeScheduleStore(),
        device,
        clock=lambda: MONDAY_NOON,
    )

    assert await service.check_display_status("d1") == DisplayStatus.ONLINE
    assert device.status_calls == ["T-1"]
    assert patches == ["online"]


async def test_malformed_display_row_raises_store_error():
    row = {**DISPLAY_ROW, "status": "maintenance"}
    store = SupabaseDisplayStore(make_rest(lambda request: httpx.Response(200, json=[row])))

    with pytest.raises(StoreError):
        await store.get("d1")


async def test_list_by_user_skips_malformed_rows():
    rows = [
        {**DISPLAY_ROW, "id": "bad", "status": "maintenance"},
        DISPLAY_ROW,
        {"user_id": "u1"},
    ]
    store = SupabaseDisplayStore(make_rest(lambda request: httpx.Response(200, json=rows)))

    displays = await store.list_by_user("u1")

    assert [d.id for d in displays] == ["d1"]


async def test_user_fan_out_survives_malformed_display_row():
    rows = [{**DISPLAY_ROW, "id": "bad", "status": "maintenance"}, DISPLAY_ROW]

    def handler(request):
        if request.method == "PATCH":
            return httpx.Response(204)
        if "user_id" in request.url.params:
            return httpx.Response(200, json=rows)
        return httpx.Response(200, json=[DISPLAY_ROW])

    service = MonitoringService(
        SupabaseDisplayStore(make_rest(handler)),
        FakeScheduleStore(),
        FakeDeviceClient(),
        interval_s=60.0,
        clock=lambda: MONDAY_NOON,
    )

    try:
        assert await service.start_user_display_monitoring("u1") == ["d1"]
        assert service.monitored_displays() == ["d1"]
    finally:
        service.stop_all_monitoring()
