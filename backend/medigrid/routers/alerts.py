from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medigrid.database import get_db
from medigrid.dependencies import resolve_at
from medigrid.schemas.risk import AlertPage
from medigrid.services import power_engine
from medigrid.services.schedule_store import ScheduleStore, get_store

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("/", response_model=AlertPage)
async def list_active_alerts(
    limit: int | None = Query(None, ge=0, le=100),
    at: datetime = Depends(resolve_at),
    db: Session = Depends(get_db),
    store: ScheduleStore = Depends(get_store),
):
    """Facilities currently inside an outage window, most severe first."""
    return power_engine.active_alerts(db, at, limit=limit, store=store)
