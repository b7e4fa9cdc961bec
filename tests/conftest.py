"""
Shared fixtures for the monitoring tests.
"""

import pytest

from led_manager.common.models import Display
from led_manager.services.monitoring import MonitoringService

from .fakes import MONDAY_NOON, FakeDeviceClient, FakeDisplayStore, FakeScheduleStore


@pytest.fixture
def displays() -> FakeDisplayStore:
    return FakeDisplayStore([
        Display(id="d1", terminal_id="t1", user_id="u1"),
        Display(id="d2", terminal_id="t2", user_id="u1"),
        Display(id="d3", terminal_id="t3", user_id="u2"),
    ])


@pytest.fixture
def schedules() -> FakeScheduleStore:
    return FakeScheduleStore()


@pytest.fixture
def device() -> FakeDeviceClient:
    return FakeDeviceClient()


@pytest.fixture
def clock():
    return lambda: MONDAY_NOON


@pytest.fixture
def service(displays, schedules, device, clock) -> MonitoringService:
    return MonitoringService(
        display_store=displays,
        schedule_store=schedules,
        device_client=device,
        interval_s=60.0,
        call_timeout_s=1.0,
        clock=clock,
    )
