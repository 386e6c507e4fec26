"""Facility registry: persisted facilities, equipment profiles and backup status."""

import logging

from sqlalchemy.orm import Session

from medigrid.areas.definitions import default_area_for_facility
from medigrid.errors import DuplicateFacility, NotFound
from medigrid.models.facility import EquipmentRecord, FacilityRecord
from medigrid.schemas.facility import (
    BackupPowerStatus,
    CriticalEquipment,
    EquipmentPriority,
    Facility,
    FacilityProfile,
    FacilityRegistration,
    FacilityType,
)

logger = logging.getLogger(__name__)


def register_facility(db: Session, registration: FacilityRegistration) -> FacilityProfile:
    facility = registration.facility
    if db.get(FacilityRecord, facility.id) is not None:
        raise DuplicateFacility(facility.id)

    resolved_area = facility.area_key
    if not resolved_area:
        default = default_area_for_facility(facility.id)
        if default is None:
            raise NotFound("Area", f"for facility {facility.id}")
        resolved_area = default.key

    record = FacilityRecord(
        id=facility.id,
        name=facility.name,
        latitude=facility.latitude,
        longitude=facility.longitude,
        province=facility.province,
        area_key=resolved_area,
        facility_type=facility.facility_type.value,
        phone_number=facility.phone_number,
        backup_status=registration.backup_status.value,
        equipment=[_equipment_record(e) for e in registration.equipment],
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Registered facility %s (%s) in %s", facility.id, facility.name, resolved_area)
    return _to_profile(record)


def get_profile(db: Session, facility_id: str) -> FacilityProfile:
    return _to_profile(_get_record(db, facility_id))


def list_profiles(db: Session) -> list[FacilityProfile]:
    records = db.query(FacilityRecord).order_by(FacilityRecord.id).all()
    return [_to_profile(r) for r in records]


def update_backup_status(db: Session, facility_id: str, status: BackupPowerStatus) -> FacilityProfile:
    record = _get_record(db, facility_id)
    previous = record.backup_status
    record.backup_status = status.value
    db.commit()
    db.refresh(record)
    logger.info("Facility %s backup status %s -> %s", facility_id, previous, status.value)
    return _to_profile(record)


def replace_equipment(
    db: Session, facility_id: str, equipment: list[CriticalEquipment],
) -> FacilityProfile:
    record = _get_record(db, facility_id)
    record.equipment = [_equipment_record(e) for e in equipment]
    db.commit()
    db.refresh(record)
    return _to_profile(record)


def _get_record(db: Session, facility_id: str) -> FacilityRecord:
    record = db.get(FacilityRecord, facility_id)
    if record is None:
        raise NotFound("Facility", facility_id)
    return record


def _equipment_record(item: CriticalEquipment) -> EquipmentRecord:
    return EquipmentRecord(
        name=item.name,
        power_draw_watts=item.power_draw_watts,
        runtime_minutes=item.runtime_minutes,
        priority=item.priority.value,
        alternative_power=item.alternative_power,
    )


def _to_profile(record: FacilityRecord) -> FacilityProfile:
    return FacilityProfile(
        facility=Facility(
            id=record.id,
            name=record.name,
            latitude=record.latitude,
            longitude=record.longitude,
            province=record.province or "",
            area_key=record.area_key,
            facility_type=FacilityType(record.facility_type),
            phone_number=record.phone_number or "",
        ),
        backup_status=BackupPowerStatus(record.backup_status),
        equipment=tuple(
            CriticalEquipment(
                name=e.name,
                power_draw_watts=e.power_draw_watts,
                runtime_minutes=e.runtime_minutes,
                priority=EquipmentPriority(e.priority),
                alternative_power=bool(e.alternative_power),
            )
            for e in record.equipment
        ),
    )
