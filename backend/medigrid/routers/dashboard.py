from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medigrid.database import get_db
from medigrid.dependencies import resolve_at
from medigrid.schemas.dashboard import DashboardResponse, PowerOverview
from medigrid.schemas.schedule import RiskTier
from medigrid.services import alert_aggregator, facility_registry, risk_assessor
from medigrid.services.schedule_store import ScheduleStore, get_store

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/", response_model=DashboardResponse)
async def get_dashboard(
    limit: int | None = Query(None, ge=0, le=100),
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    """Composite power dashboard across all registered facilities."""
    snapshot = store.snapshot()
    profiles = facility_registry.list_profiles(db)

    alerts = alert_aggregator.active_alerts(profiles, at, snapshot, limit=limit)
    assessments = risk_assessor.assess_all(profiles, at, snapshot)

    risk_counts = {tier.value: 0 for tier in RiskTier}
    for a in assessments:
        risk_counts[a.current_risk.value] += 1

    overview = PowerOverview(
        total_facilities=len(profiles),
        facilities_in_outage=alerts.total_active,
        highest_active_stage=alerts.highest_stage,
        risk_counts=risk_counts,
        backup_not_ready=sum(1 for a in assessments if not a.backup_power_ready),
        schedule_loaded_at=snapshot.loaded_at,
        schedule_published_at=snapshot.published_at(),
        stale_data=snapshot.is_stale(at),
    )

    return DashboardResponse(as_of=at, overview=overview, alerts=alerts)
