"""
Monitoring Router

Control surface for the monitoring loop:
- Subscribe: start monitoring all of the caller's displays
- Start/stop monitoring for a single display
- Run one status check on demand
- Scheduler statistics
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from led_manager.api.auth import CurrentUser, get_current_user
from led_manager.common.exceptions import NotFoundError, StoreError
from led_manager.common.models import Display
from led_manager.services.monitoring import MonitoringService

router = APIRouter()


def get_monitoring(request: Request) -> MonitoringService:
    """Dependency returning the process-wide MonitoringService."""
    return request.app.state.monitoring


async def get_owned_display(
    display_id: str,
    user: CurrentUser = Depends(get_current_user),
    monitoring: MonitoringService = Depends(get_monitoring),
) -> Display:
    """Load a display and make sure it belongs to the caller."""
    try:
        display = await monitoring.display_store.get(display_id)
    except NotFoundError:
        display = None
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        )

    # Someone else's display is reported as missing
    if display is None or display.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Display not found",
        )
    return display


@router.get("")
async def monitoring_stats(
    user: CurrentUser = Depends(get_current_user),
    monitoring: MonitoringService = Depends(get_monitoring),
):
    """Scheduler statistics for the caller's monitored displays."""
    try:
        displays = await monitoring.display_store.list_by_user(user.id)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    stats = monitoring.get_stats([d.id for d in displays])
    return {"displays": stats, "total": len(stats)}


@router.post("/subscribe")
async def subscribe_displays(
    user: CurrentUser = Depends(get_current_user),
    monitoring: MonitoringService = Depends(get_monitoring),
):
    """Start monitoring every display owned by the caller."""
    display_ids = await monitoring.start_user_display_monitoring(user.id)
    return {"monitoring": display_ids, "total": len(display_ids)}


@router.post("/displays/{display_id}/start")
async def start_display_monitoring(
    display: Display = Depends(get_owned_display),
    monitoring: MonitoringService = Depends(get_monitoring),
):
    await monitoring.start_monitoring(display.id)
    return {"display_id": display.id, "monitoring": True}


@router.post("/displays/{display_id}/stop")
async def stop_display_monitoring(
    display: Display = Depends(get_owned_display),
    monitoring: MonitoringService = Depends(get_monitoring),
):
    was_running = monitoring.stop_monitoring(display.id)
    return {"display_id": display.id, "monitoring": False, "was_monitoring": was_running}


@router.post("/displays/{display_id}/check")
async def check_display(
    display: Display = Depends(get_owned_display),
    monitoring: MonitoringService = Depends(get_monitoring),
):
    """Run one status check now and return the stored status."""
    result = await monitoring.check_display_status(display.id)
    return {"display_id": display.id, "status": result.value}
