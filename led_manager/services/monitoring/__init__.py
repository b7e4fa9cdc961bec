"""Display status monitoring and scheduled content reconciliation."""

from .schedule_selector import local_weekday, select_active_schedule
from .service import MonitoringService, derive_status

__all__ = [
    "MonitoringService",
    "derive_status",
    "select_active_schedule",
    "local_weekday",
]
