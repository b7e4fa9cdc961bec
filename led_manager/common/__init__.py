"""
Common Utilities

Shared modules used across all services:
- config.py - Settings loaded from the environment
- models.py - Display / Schedule dataclasses
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- scheduler.py - Fixed-interval loops
- interfaces.py - Store and device client protocols
"""

from .config import Settings, get_settings
from .models import (
    WEEKDAYS,
    ContentType,
    Display,
    DisplayStatus,
    Schedule,
    load_display,
    load_schedule,
    parse_timestamp,
    weekday_name,
)
from .exceptions import (
    DisplayManagerError,
    ConfigError,
    NotFoundError,
    StoreError,
    RemoteUnavailableError,
    ReconciliationError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    log_status_change,
    log_publish,
)
from .scheduler import ScheduledLoop, SchedulerGroup
from .interfaces import DeviceClient, DisplayStore, ScheduleStore

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models
    "WEEKDAYS",
    "ContentType",
    "Display",
    "DisplayStatus",
    "Schedule",
    "load_display",
    "load_schedule",
    "parse_timestamp",
    "weekday_name",
    # Exceptions
    "DisplayManagerError",
    "ConfigError",
    "NotFoundError",
    "StoreError",
    "RemoteUnavailableError",
    "ReconciliationError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "log_status_change",
    "log_publish",
    # Scheduling
    "ScheduledLoop",
    "SchedulerGroup",
    # Interfaces
    "DeviceClient",
    "DisplayStore",
    "ScheduleStore",
]
