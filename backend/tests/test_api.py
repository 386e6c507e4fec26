import pytest
from httpx import ASGITransport, AsyncClient

from factories import at, make_entry, make_slot
from medigrid.config import settings
from medigrid.database import get_db
from medigrid.main import app
from medigrid.services.clock import FixedClock, get_clock
from medigrid.services.schedule_store import ScheduleStore, get_store

SOWETO = "city-of-johannesburg:soweto"
SANDTON = "city-of-johannesburg:sandton"


@pytest.fixture
def schedule_store():
    store = ScheduleStore()
    store.replace(
        [
            make_entry([make_slot(1, "08:00", "10:00")], stage=4, area="Soweto",
                       emergency_contacts=("011-490-7870",)),
            make_entry([make_slot(1, "15:00", "17:00")], stage=2, area="Sandton"),
        ],
        loaded_at=at(19, 6),
    )
    return store


@pytest.fixture
async def client(session_factory, schedule_store):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: schedule_store
    app.dependency_overrides[get_clock] = lambda: FixedClock(at(19, 9))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def _registration(facility_id, name, area_key, backup="PARTIAL", equipment=None):
    return {
        "facility": {
            "id": facility_id,
            "name": name,
            "province": "Gauteng",
            "area_key": area_key,
            "phone_number": "011-933-0000",
        },
        "backup_status": backup,
        "equipment": equipment or [],
    }


VENTILATOR = {
    "name": "Ventilator",
    "power_draw_watts": 500,
    "runtime_minutes": 90,
    "priority": "LIFE_SUPPORT",
}


async def _register_bara(client):
    resp = await client.post(
        "/api/v1/facilities/",
        json=_registration("za_gp_chb_001", "Chris Hani Baragwanath", SOWETO, equipment=[VENTILATOR]),
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "schedule_version": 1, "areas": 2}


@pytest.mark.asyncio
async def test_register_and_fetch_facility(client):
    created = await _register_bara(client)
    assert created["facility"]["area_key"] == SOWETO

    resp = await client.get("/api/v1/facilities/za_gp_chb_001")
    assert resp.status_code == 200
    assert resp.json() == created


@pytest.mark.asyncio
async def test_duplicate_registration_conflict(client):
    await _register_bara(client)
    resp = await client.post(
        "/api/v1/facilities/",
        json=_registration("za_gp_chb_001", "Chris Hani Baragwanath", SOWETO),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_registration_without_resolvable_area(client):
    resp = await client.post("/api/v1/facilities/", json=_registration("clinic-42", "Clinic", ""))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_unknown_facility_404(client):
    assert (await client.get("/api/v1/facilities/za_gp_nope")).status_code == 404
    assert (await client.get("/api/v1/risk/za_gp_nope")).status_code == 404


@pytest.mark.asyncio
async def test_risk_assessment_during_outage(client):
    await _register_bara(client)
    resp = await client.get("/api/v1/risk/za_gp_chb_001")
    assert resp.status_code == 200
    data = resp.json()
    assert data["current_risk"] == "CRITICAL"
    assert data["current_stage"] == 4
    assert data["backup_power_ready"] is False
    assert data["survivability_margin_minutes"] == -30
    assert data["stale_data"] is False
    assert "arrange alternate power for Ventilator" in data["recommendations"]


@pytest.mark.asyncio
async def test_risk_assessment_at_explicit_time(client):
    await _register_bara(client)
    resp = await client.get("/api/v1/risk/za_gp_chb_001", params={"at": "2026-10-19T11:00:00+02:00"})
    data = resp.json()
    assert data["active_outage"] is None
    assert data["current_stage"] == 0


@pytest.mark.asyncio
async def test_backup_status_update_changes_assessment(client):
    await _register_bara(client)
    resp = await client.put(
        "/api/v1/facilities/za_gp_chb_001/backup-status",
        json={"backup_status": "FULLY_OPERATIONAL"},
    )
    assert resp.status_code == 200
    data = (await client.get("/api/v1/risk/za_gp_chb_001")).json()
    assert data["backup_power_ready"] is True


@pytest.mark.asyncio
async def test_equipment_plan_and_protocol(client):
    await _register_bara(client)
    plan = (await client.get("/api/v1/risk/za_gp_chb_001/equipment")).json()
    assert plan[0]["equipment"]["name"] == "Ventilator"
    assert plan[0]["margin_minutes"] == -30
    assert plan[0]["survives"] is False

    protocol = (await client.get("/api/v1/risk/za_gp_chb_001/protocol")).json()
    assert protocol["risk_tier"] == "CRITICAL"
    assert protocol["evacuation_plan"]
    assert "City of Johannesburg: 011-490-7870" in protocol["contact_numbers"]


@pytest.mark.asyncio
async def test_upcoming_outages(client):
    await _register_bara(client)
    resp = await client.get("/api/v1/risk/za_gp_chb_001/upcoming")
    windows = resp.json()
    assert len(windows) == 1
    assert windows[0]["stage"] == 4
    assert windows[0]["duration_minutes"] == 120


@pytest.mark.asyncio
async def test_alerts_and_dashboard(client):
    await _register_bara(client)
    await client.post(
        "/api/v1/facilities/",
        json=_registration("za_gp_snd_001", "Sandton Clinic", SANDTON, backup="FULLY_OPERATIONAL"),
    )

    page = (await client.get("/api/v1/alerts/")).json()
    assert page["total_active"] == 1
    assert page["overflow"] == 0
    assert page["alerts"][0]["facility_id"] == "za_gp_chb_001"
    assert page["alerts"][0]["stage"] == 4

    later = (await client.get("/api/v1/alerts/", params={"at": "2026-10-19T16:00:00+02:00"})).json()
    assert [a["facility_id"] for a in later["alerts"]] == ["za_gp_snd_001"]

    dashboard = (await client.get("/api/v1/dashboard/")).json()
    overview = dashboard["overview"]
    assert overview["total_facilities"] == 2
    assert overview["facilities_in_outage"] == 1
    assert overview["highest_active_stage"] == 4
    assert overview["risk_counts"]["CRITICAL"] == 1

    capped = (await client.get("/api/v1/dashboard/", params={"limit": 0})).json()
    assert capped["alerts"]["alerts"] == []
    assert capped["overview"]["facilities_in_outage"] == 1
    assert capped["overview"]["highest_active_stage"] == 4


@pytest.mark.asyncio
async def test_schedules_endpoints(client):
    schedules = (await client.get("/api/v1/schedules/")).json()
    assert [s["area_key"] for s in schedules] == [SANDTON, SOWETO]

    windows = (await client.get(f"/api/v1/schedules/{SOWETO}/windows", params={"horizon_hours": 24})).json()
    assert len(windows) == 1
    assert windows[0]["start"].startswith("2026-10-19T08:00:00")

    stage = (await client.get(f"/api/v1/schedules/{SOWETO}/stage")).json()
    assert stage["stage"] == 4
    assert stage["label"] == "Stage 4"
    assert stage["risk_tier"] == "CRITICAL"

    assert (await client.get("/api/v1/schedules/nowhere:nothing")).status_code == 404
    assert (await client.get("/api/v1/schedules/nowhere:nothing/windows")).status_code == 404


@pytest.mark.asyncio
async def test_equipment_rank(client):
    resp = await client.post(
        "/api/v1/equipment/rank",
        json=[
            {"name": "ventilator", "power_draw_watts": 400, "runtime_minutes": 60, "priority": "LIFE_SUPPORT"},
            {"name": "fridge", "power_draw_watts": 150, "runtime_minutes": 240, "priority": "SUPPORT"},
            {"name": "dialysis", "power_draw_watts": 600, "runtime_minutes": 30, "priority": "LIFE_SUPPORT"},
        ],
    )
    assert resp.status_code == 200
    assert [e["name"] for e in resp.json()] == ["dialysis", "ventilator", "fridge"]


@pytest.mark.asyncio
async def test_default_areas(client):
    areas = (await client.get("/api/v1/areas/defaults/", params={"province": "Gauteng"})).json()
    assert areas == [{
        "area_key": "city-of-johannesburg:johannesburg-central",
        "municipality": "City of Johannesburg",
        "province": "Gauteng",
        "area": "Johannesburg Central",
        "facility_id_prefix": "za_gp_",
    }]


@pytest.mark.asyncio
async def test_admin_reload_loads_bundled_feed(client):
    resp = await client.post("/api/v1/admin/reload")
    assert resp.status_code == 200
    assert resp.json() == {"status": "reload_complete", "version": 2, "areas": 13}


@pytest.mark.asyncio
async def test_failed_reload_keeps_serving_previous_snapshot(client, monkeypatch, tmp_path):
    bad = tmp_path / "schedules.json"
    bad.write_text("[{")
    monkeypatch.setattr(settings, "schedule_feed_path", str(bad))

    resp = await client.post("/api/v1/admin/reload")
    assert resp.status_code == 503
    health = (await client.get("/health")).json()
    assert health["schedule_version"] == 1
    assert health["areas"] == 2
