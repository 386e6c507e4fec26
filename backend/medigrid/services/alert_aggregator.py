"""Active outage alerts across all registered facilities.

Order: stage descending, then outage start, then outage end, then facility
name. A facility whose evaluation fails is logged and skipped.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from medigrid.config import settings
from medigrid.errors import NotFound
from medigrid.schemas.facility import FacilityProfile
from medigrid.schemas.risk import AlertPage, PowerOutageAlert
from medigrid.schemas.schedule import Stage
from medigrid.services.clock import localize
from medigrid.services.schedule_store import ScheduleSnapshot
from medigrid.services.stage_resolver import active_window, resolve_windows

logger = logging.getLogger(__name__)


def active_alerts(
    profiles: Iterable[FacilityProfile],
    now: datetime,
    snapshot: ScheduleSnapshot,
    limit: int | None = None,
) -> AlertPage:
    now = localize(now)
    if limit is None:
        limit = settings.alert_limit

    alerts: list[PowerOutageAlert] = []
    for profile in profiles:
        try:
            alert = _alert_for(profile, now, snapshot)
        except NotFound:
            logger.debug("No schedule for facility %s, skipping", profile.facility.id)
            continue
        except Exception as e:
            logger.error("Alert evaluation failed for facility %s: %s", profile.facility.id, e)
            continue
        if alert is not None:
            alerts.append(alert)

    alerts.sort(key=lambda a: (-a.stage, a.outage_start, a.outage_end, a.facility_name))
    capped = alerts[:max(0, limit)]
    return AlertPage(
        as_of=now,
        alerts=capped,
        overflow=len(alerts) - len(capped),
        total_active=len(alerts),
        highest_stage=alerts[0].stage if alerts else Stage.STAGE_0,
    )


def _alert_for(
    profile: FacilityProfile, now: datetime, snapshot: ScheduleSnapshot,
) -> PowerOutageAlert | None:
    facility = profile.facility
    entry = snapshot.get(facility.area_key)
    window = active_window(resolve_windows(entry, now, timedelta(0)), now)
    if window is None:
        return None
    return PowerOutageAlert(
        id=f"outage_{facility.id}_{int(window.start.timestamp())}",
        facility_id=facility.id,
        facility_name=facility.name,
        stage=window.stage,
        outage_start=window.start,
        outage_end=window.end,
        backup_status=profile.backup_status,
    )
