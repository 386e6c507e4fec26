import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from medigrid.config import settings
from medigrid.database import init_db
from medigrid.errors import ScheduleFeedError
from medigrid.services.schedule_store import ScheduleStore, get_store, store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    try:
        store.reload()
    except ScheduleFeedError as e:
        logger.error("Initial schedule load failed, starting with an empty snapshot: %s", e)
    from medigrid.tasks.scheduler import start_scheduler, stop_scheduler
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="MediGrid Power",
    description="Load-shedding risk and scheduling engine for healthcare facilities",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from medigrid.routers import alerts, areas, dashboard, facilities, risk, schedules  # noqa: E402

app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(schedules.router, prefix="/api/v1")
app.include_router(facilities.router, prefix="/api/v1")
app.include_router(risk.router, prefix="/api/v1")
app.include_router(alerts.router, prefix="/api/v1")
app.include_router(areas.router, prefix="/api/v1")


@app.get("/health")
async def health(schedule_store: ScheduleStore = Depends(get_store)):
    snapshot = schedule_store.snapshot()
    return {"status": "ok", "schedule_version": snapshot.version, "areas": len(snapshot.entries)}


@app.post("/api/v1/admin/reload")
async def trigger_reload(schedule_store: ScheduleStore = Depends(get_store)):
    """Manually reload the schedule feed. On failure the previous snapshot stays live."""
    try:
        snapshot = schedule_store.reload()
    except ScheduleFeedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "reload_complete", "version": snapshot.version, "areas": len(snapshot.entries)}
