"""API routes for the PoolClock status server."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..logger import get_logger
from ..service import SchedulerService

router = APIRouter()
logger = get_logger(__name__)


def get_service(request: Request) -> SchedulerService:
    """Retrieve the shared scheduler service from the application state."""

    service = getattr(request.app.state, "service", None)
    if service is None:
        logger.error("Scheduler service not initialised on application state")
        raise RuntimeError("Scheduler service not initialised.")
    return service


@router.get("/api/status")
async def scheduler_status(service: SchedulerService = Depends(get_service)) -> Dict[str, Any]:
    """Return the scheduler loop status and the last tick report."""

    payload = service.loop.status()
    payload["schedules"] = len(service.collection)
    return payload


@router.get("/api/schedules")
async def list_schedules(service: SchedulerService = Depends(get_service)) -> List[Dict[str, Any]]:
    """Return the run state of every controlled schedule."""

    schedules = [runtime.to_dict() for runtime in service.collection]
    logger.debug("Listing %d controlled schedules", len(schedules))
    return schedules


@router.get("/api/schedules/{schedule_id}")
async def read_schedule(schedule_id: int, service: SchedulerService = Depends(get_service)) -> Dict[str, Any]:
    """Return the run state and configuration of a single schedule."""

    runtime = service.collection.get(schedule_id)
    if runtime is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Schedule {schedule_id} is not controlled.")
    payload = runtime.to_dict()
    payload["config"] = runtime.schedule.model_dump(mode="json")
    return payload


@router.get("/api/equipment")
async def equipment_status(service: SchedulerService = Depends(get_service)) -> Dict[str, Any]:
    """Return the simulated circuits and bodies."""

    return {
        "circuits": [circuit.to_dict() for circuit in service.equipment.circuits()],
        "bodies": [body.to_dict() for body in service.equipment.bodies()],
    }


@router.post("/api/tick")
async def run_tick(service: SchedulerService = Depends(get_service)) -> Dict[str, Any]:
    """Run one scheduling pass immediately and return its report."""

    logger.info("Manual scheduling tick requested")
    report = await asyncio.to_thread(service.loop.tick)
    if report is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Scheduling tick failed.")
    return report.to_dict()
