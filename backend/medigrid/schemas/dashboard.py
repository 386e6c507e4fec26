from datetime import datetime

from pydantic import BaseModel

from medigrid.schemas.risk import AlertPage
from medigrid.schemas.schedule import Stage


class PowerOverview(BaseModel):
    total_facilities: int = 0
    facilities_in_outage: int = 0
    highest_active_stage: Stage = Stage.STAGE_0
    risk_counts: dict[str, int] = {}
    backup_not_ready: int = 0
    schedule_loaded_at: datetime | None = None
    schedule_published_at: datetime | None = None  # oldest entry in the feed
    stale_data: bool = False


class DashboardResponse(BaseModel):
    as_of: datetime
    overview: PowerOverview
    alerts: AlertPage
