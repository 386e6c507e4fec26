from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from medigrid.database import get_db
from medigrid.errors import DuplicateFacility, NotFound
from medigrid.schemas.facility import BackupStatusUpdate, CriticalEquipment, FacilityProfile, FacilityRegistration
from medigrid.services import facility_registry

router = APIRouter(prefix="/facilities", tags=["facilities"])


@router.post("/", response_model=FacilityProfile, status_code=201)
async def register_facility(registration: FacilityRegistration, db: Session = Depends(get_db)):
    try:
        return facility_registry.register_facility(db, registration)
    except DuplicateFacility as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/", response_model=list[FacilityProfile])
async def list_facilities(db: Session = Depends(get_db)):
    return facility_registry.list_profiles(db)


@router.get("/{facility_id}", response_model=FacilityProfile)
async def get_facility(facility_id: str, db: Session = Depends(get_db)):
    try:
        return facility_registry.get_profile(db, facility_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{facility_id}/backup-status", response_model=FacilityProfile)
async def update_backup_status(
    facility_id: str, update: BackupStatusUpdate, db: Session = Depends(get_db),
):
    try:
        return facility_registry.update_backup_status(db, facility_id, update.backup_status)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{facility_id}/equipment", response_model=FacilityProfile)
async def replace_equipment(
    facility_id: str, equipment: list[CriticalEquipment], db: Session = Depends(get_db),
):
    try:
        return facility_registry.replace_equipment(db, facility_id, equipment)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
