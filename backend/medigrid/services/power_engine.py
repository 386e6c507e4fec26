"""Engine entry points used by the presentation layer.

Each call reads the schedule snapshot once, so a concurrent reload is either
fully visible to it or not at all. All calls are synchronous and free of side
effects apart from the registry read.
"""

from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from medigrid.config import settings
from medigrid.errors import NotFound
from medigrid.schemas.facility import CriticalEquipment
from medigrid.schemas.risk import AlertPage, EmergencyProtocol, PowerRiskAssessment, RankedEquipment, StageStatus
from medigrid.schemas.schedule import OutageWindow
from medigrid.services import alert_aggregator, emergency_protocol, equipment_prioritizer, facility_registry, risk_assessor
from medigrid.services.clock import localize
from medigrid.services.schedule_store import ScheduleStore, store as default_store
from medigrid.services.stage_resolver import current_stage, current_window, resolve_windows, upcoming_windows


def resolve_area_windows(
    area_key: str,
    start: datetime,
    horizon: timedelta,
    store: ScheduleStore = default_store,
) -> list[OutageWindow]:
    entry = store.snapshot().get(area_key)
    return resolve_windows(entry, start, horizon)


def stage_status(area_key: str, at: datetime, store: ScheduleStore = default_store) -> StageStatus:
    at = localize(at)
    entry = store.snapshot().get(area_key)
    window = current_window(entry, at)
    stage = current_stage(entry, at)
    return StageStatus(
        area_key=area_key,
        at=at,
        stage=stage,
        label=stage.label,
        description=stage.description,
        risk_tier=stage.risk_tier,
        active_outage=window,
    )


def assess(
    db: Session, facility_id: str, now: datetime, store: ScheduleStore = default_store,
) -> PowerRiskAssessment:
    profile = facility_registry.get_profile(db, facility_id)
    return risk_assessor.assess(profile, now, store.snapshot())


def active_alerts(
    db: Session, now: datetime, limit: int | None = None, store: ScheduleStore = default_store,
) -> AlertPage:
    profiles = facility_registry.list_profiles(db)
    return alert_aggregator.active_alerts(profiles, now, store.snapshot(), limit=limit)


def rank(equipment: list[CriticalEquipment]) -> list[CriticalEquipment]:
    return equipment_prioritizer.rank(equipment)


def equipment_plan(
    db: Session, facility_id: str, now: datetime, store: ScheduleStore = default_store,
) -> list[RankedEquipment]:
    """Ranked equipment with survivability against the active or next outage."""
    profile = facility_registry.get_profile(db, facility_id)
    assessment = risk_assessor.assess(profile, now, store.snapshot())
    window = assessment.active_outage or assessment.next_outage
    return equipment_prioritizer.assess_survivability(
        profile.equipment, window.duration_minutes if window else None,
    )


def upcoming_outages(
    db: Session, facility_id: str, now: datetime, store: ScheduleStore = default_store,
) -> list[OutageWindow]:
    profile = facility_registry.get_profile(db, facility_id)
    entry = store.snapshot().get(profile.facility.area_key)
    return upcoming_windows(entry, now, hours=settings.upcoming_window_hours)


def protocol(
    db: Session, facility_id: str, now: datetime, store: ScheduleStore = default_store,
) -> EmergencyProtocol:
    """Protocol for the stage in force now, or for the next outage's stage."""
    profile = facility_registry.get_profile(db, facility_id)
    snapshot = store.snapshot()
    assessment = risk_assessor.assess(profile, now, snapshot)
    window = assessment.active_outage or assessment.next_outage
    try:
        entry = snapshot.get(profile.facility.area_key)
    except NotFound:
        entry = None
    stage = window.stage if window else assessment.current_stage
    return emergency_protocol.build_protocol(profile, stage, entry)
