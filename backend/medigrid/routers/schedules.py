from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query

from medigrid.dependencies import resolve_at
from medigrid.errors import NotFound
from medigrid.schemas.risk import StageStatus
from medigrid.schemas.schedule import OutageWindow, ScheduleEntry
from medigrid.services import power_engine
from medigrid.services.schedule_store import ScheduleStore, get_store

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("/", response_model=list[ScheduleEntry])
async def list_schedules(
    province: str | None = Query(None),
    store: ScheduleStore = Depends(get_store),
):
    """All published schedules in the current snapshot, optionally by province."""
    entries = sorted(store.snapshot().entries.values(), key=lambda e: e.area_key)
    if province:
        entries = [e for e in entries if e.province.casefold() == province.casefold()]
    return entries


@router.get("/{area_key}", response_model=ScheduleEntry)
async def get_schedule(area_key: str, store: ScheduleStore = Depends(get_store)):
    try:
        return store.get_schedule(area_key)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{area_key}/windows", response_model=list[OutageWindow])
async def get_windows(
    area_key: str,
    horizon_hours: int = Query(24, ge=0, le=24 * 14),
    at: datetime = Depends(resolve_at),
    store: ScheduleStore = Depends(get_store),
):
    """Outage windows for an area from ``at`` over the next ``horizon_hours``."""
    try:
        return power_engine.resolve_area_windows(area_key, at, timedelta(hours=horizon_hours), store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{area_key}/stage", response_model=StageStatus)
async def get_stage(
    area_key: str,
    at: datetime = Depends(resolve_at),
    store: ScheduleStore = Depends(get_store),
):
    try:
        return power_engine.stage_status(area_key, at, store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
