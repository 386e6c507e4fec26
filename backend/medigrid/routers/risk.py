from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from medigrid.database import get_db
from medigrid.dependencies import resolve_at
from medigrid.errors import NotFound
from medigrid.schemas.facility import CriticalEquipment
from medigrid.schemas.risk import EmergencyProtocol, PowerRiskAssessment, RankedEquipment
from medigrid.schemas.schedule import OutageWindow
from medigrid.services import power_engine
from medigrid.services.schedule_store import ScheduleStore, get_store

router = APIRouter(tags=["risk"])


@router.get("/risk/{facility_id}", response_model=PowerRiskAssessment)
async def get_assessment(
    facility_id: str,
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    """Power risk assessment for a facility at ``at`` (default: now)."""
    try:
        return power_engine.assess(db, facility_id, at, store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/risk/{facility_id}/equipment", response_model=list[RankedEquipment])
async def get_equipment_plan(
    facility_id: str,
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    try:
        return power_engine.equipment_plan(db, facility_id, at, store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/risk/{facility_id}/upcoming", response_model=list[OutageWindow])
async def get_upcoming_outages(
    facility_id: str,
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    try:
        return power_engine.upcoming_outages(db, facility_id, at, store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/risk/{facility_id}/protocol", response_model=EmergencyProtocol)
async def get_protocol(
    facility_id: str,
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    try:
        return power_engine.protocol(db, facility_id, at, store=store)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/equipment/rank", response_model=list[CriticalEquipment])
async def rank_equipment(equipment: list[CriticalEquipment]):
    """Rank arbitrary equipment for load-shedding mitigation."""
    return power_engine.rank(equipment)
