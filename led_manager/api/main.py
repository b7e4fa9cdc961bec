"""
LED Display Manager - Monitoring API

FastAPI application that owns the display monitoring loop:
- Builds the Supabase stores, the VNNOX client and the MonitoringService
  at startup
- Exposes start/stop controls for the dashboard
- Stops every monitoring loop at shutdown

Run with:
    uvicorn led_manager.api.main:app --port 3001
"""

from contextlib import asynccontextmanager
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from led_manager.api.routers import monitoring
from led_manager.common.config import get_settings
from led_manager.common.logging_setup import get_service_logger
from led_manager.services.monitoring import MonitoringService
from led_manager.services.storage import (
    SupabaseDisplayStore,
    SupabaseRest,
    SupabaseScheduleStore,
)
from led_manager.services.vnnox import VnnoxClient

logger = get_service_logger("api")


def build_monitoring_service() -> tuple[MonitoringService, list]:
    """Wire the monitoring service from settings. Returns it plus closeables."""
    settings = get_settings()
    rest = SupabaseRest.from_settings(settings)
    vnnox = VnnoxClient.from_settings(settings)

    service = MonitoringService(
        display_store=SupabaseDisplayStore(rest),
        schedule_store=SupabaseScheduleStore(rest),
        device_client=vnnox,
        interval_s=settings.poll_interval_s,
        call_timeout_s=settings.request_timeout_s,
        tz=ZoneInfo(settings.schedule_timezone),
    )
    return service, [rest, vnnox]


def create_app(monitoring_service: Optional[MonitoringService] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        monitoring_service: Pre-built service (tests); built from
            settings at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        closeables = []
        if monitoring_service is not None:
            app.state.monitoring = monitoring_service
        else:
            app.state.monitoring, closeables = build_monitoring_service()

        settings = get_settings()
        logger.info(
            "Monitoring API started",
            extra={
                "environment": settings.environment,
                "poll_interval_s": app.state.monitoring.interval_s,
            },
        )

        yield

        await app.state.monitoring.shutdown()
        for resource in closeables:
            await resource.close()
        logger.info("Monitoring API stopped")

    app = FastAPI(
        title="LED Display Manager - Monitoring API",
        description="Status monitoring and scheduled content for VNNOX LED displays",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        monitoring.router,
        prefix="/api/monitoring",
        tags=["Monitoring"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "ok",
            "monitored_displays": len(app.state.monitoring.monitored_displays()),
        }

    return app


app = create_app()
