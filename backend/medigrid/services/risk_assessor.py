"""Facility power risk assessment.

Tier decision, highest applicable wins:
  CRITICAL  active outage and (life-critical runtime < outage length, or no backup)
  HIGH      degraded backup and (active outage, or next outage within the lead time)
  MODERATE  a window at stage >= 3 inside the look-ahead (24h)
  LOW       otherwise

Survivability margin uses the shortest LIFE_SUPPORT runtime (CRITICAL_CARE
when the facility has no life-support items) against the full length of the
active window, or the next one when no outage is underway.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from medigrid.config import settings
from medigrid.errors import NotFound
from medigrid.schemas.facility import BackupPowerStatus, CriticalEquipment, EquipmentPriority, FacilityProfile
from medigrid.schemas.risk import PowerRiskAssessment
from medigrid.schemas.schedule import OutageWindow, RiskTier, Stage
from medigrid.services import equipment_prioritizer
from medigrid.services.clock import localize
from medigrid.services.schedule_store import ScheduleSnapshot
from medigrid.services.stage_resolver import active_window, next_window, resolve_windows

logger = logging.getLogger(__name__)

SCHEDULE_UNAVAILABLE = "schedule data unavailable — verify manually"
SERVICE_BACKUP = "service backup power system"
ACTIVATE_PROTOCOL = "activate facility emergency protocol"

_DEGRADED_BACKUP = {
    BackupPowerStatus.PARTIAL,
    BackupPowerStatus.MINIMAL,
    BackupPowerStatus.MAINTENANCE_REQUIRED,
}


def assess(
    profile: FacilityProfile,
    now: datetime,
    snapshot: ScheduleSnapshot,
) -> PowerRiskAssessment:
    now = localize(now)
    facility = profile.facility
    stale = snapshot.is_stale(now, area_key=facility.area_key)

    try:
        entry = snapshot.get(facility.area_key)
    except NotFound:
        logger.warning("No schedule for facility %s (area %s)", facility.id, facility.area_key)
        return PowerRiskAssessment(
            facility_id=facility.id,
            assessed_at=now,
            current_risk=RiskTier.LOW,
            backup_power_ready=_backup_ready(profile.backup_status, None),
            schedule_available=False,
            stale_data=stale,
            recommendations=(SCHEDULE_UNAVAILABLE,),
        )

    windows = resolve_windows(entry, now, timedelta(hours=settings.assessment_horizon_hours))
    active = active_window(windows, now)
    upcoming = next_window(windows, now)
    relevant = active or upcoming
    outage_minutes = relevant.duration_minutes if relevant else None
    margin = equipment_prioritizer.survivability_margin(profile.equipment, outage_minutes)

    tier = _risk_tier(profile.backup_status, active, upcoming, margin, windows, now)

    return PowerRiskAssessment(
        facility_id=facility.id,
        assessed_at=now,
        current_risk=tier,
        current_stage=active.stage if active else Stage.STAGE_0,
        backup_power_ready=_backup_ready(profile.backup_status, margin),
        active_outage=active,
        next_outage=upcoming,
        survivability_margin_minutes=margin,
        stale_data=stale,
        recommendations=tuple(_recommendations(profile, active, upcoming, outage_minutes)),
    )


def _risk_tier(
    status: BackupPowerStatus,
    active: OutageWindow | None,
    upcoming: OutageWindow | None,
    margin: int | None,
    windows: list[OutageWindow],
    now: datetime,
) -> RiskTier:
    if active and ((margin is not None and margin < 0) or status == BackupPowerStatus.NONE):
        return RiskTier.CRITICAL

    lead = timedelta(minutes=settings.high_risk_lead_minutes)
    imminent = upcoming is not None and upcoming.start - now <= lead
    if status in _DEGRADED_BACKUP and (active or imminent):
        return RiskTier.HIGH

    lookahead_end = now + timedelta(hours=settings.moderate_lookahead_hours)
    for w in windows:
        if w.stage >= settings.moderate_stage_threshold and w.start < lookahead_end and w.end > now:
            return RiskTier.MODERATE

    return RiskTier.LOW


def _backup_ready(status: BackupPowerStatus, margin: int | None) -> bool:
    if status == BackupPowerStatus.FULLY_OPERATIONAL:
        return True
    return status == BackupPowerStatus.PARTIAL and (margin is None or margin >= 0)


def _recommendations(
    profile: FacilityProfile,
    active: OutageWindow | None,
    upcoming: OutageWindow | None,
    outage_minutes: int | None,
) -> list[str]:
    recs = []
    if outage_minutes is not None:
        for item in equipment_prioritizer.rank(profile.equipment):
            if item.priority == EquipmentPriority.NON_ESSENTIAL:
                continue
            if item.runtime_minutes < outage_minutes:
                recs.append(_equipment_recommendation(item))
    if profile.backup_status != BackupPowerStatus.FULLY_OPERATIONAL:
        recs.append(SERVICE_BACKUP)
    if any(w is not None and w.stage >= settings.emergency_protocol_stage for w in (active, upcoming)):
        recs.append(ACTIVATE_PROTOCOL)
    return recs


def _equipment_recommendation(item: CriticalEquipment) -> str:
    if item.alternative_power:
        return f"switch {item.name} to its alternate power source"
    return f"arrange alternate power for {item.name}"


def assess_all(
    profiles: Iterable[FacilityProfile],
    now: datetime,
    snapshot: ScheduleSnapshot,
) -> list[PowerRiskAssessment]:
    """Assess every facility; one that fails is logged and left out."""
    results = []
    for profile in profiles:
        try:
            results.append(assess(profile, now, snapshot))
        except Exception as e:
            logger.error("Risk assessment failed for facility %s: %s", profile.facility.id, e)
    return results
