from factories import at, make_entry, make_profile, make_slot, make_snapshot
from medigrid.schemas.facility import BackupPowerStatus
from medigrid.schemas.schedule import Stage
from medigrid.services import alert_aggregator


def _area(i: int) -> str:
    return f"Area {i}"


def _fleet(stages: list[int], slot=("08:00", "10:00")):
    """One facility per area, each area at the given stage with the same Monday slot."""
    entries = []
    profiles = []
    for i, stage in enumerate(stages):
        entry = make_entry([make_slot(1, *slot)], stage=stage, area=_area(i))
        entries.append(entry)
        profiles.append(make_profile(
            facility_id=f"za_gp_fac_{i:03d}",
            name=f"Clinic {chr(ord('A') + i)}",
            area_key=entry.area_key,
            backup=BackupPowerStatus.PARTIAL,
        ))
    return entries, profiles


def test_seven_active_capped_at_five_with_overflow():
    entries, profiles = _fleet([2, 5, 3, 5, 4, 1, 6])
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries), limit=5)

    assert len(page.alerts) == 5
    assert page.overflow == 2
    assert page.total_active == 7
    assert [a.stage for a in page.alerts] == [6, 5, 5, 4, 3]
    # equal stages fall back to start, end, then facility name
    assert [a.facility_name for a in page.alerts[1:3]] == ["Clinic B", "Clinic D"]


def test_default_limit_is_five():
    entries, profiles = _fleet([1, 2, 3, 4, 5, 6, 7])
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries))
    assert len(page.alerts) == 5
    assert page.overflow == 2


def test_earlier_start_sorts_first_within_stage():
    early = make_entry([make_slot(1, "07:00", "11:00")], stage=3, area="Early")
    late = make_entry([make_slot(1, "08:30", "09:30")], stage=3, area="Late")
    profiles = [
        make_profile(facility_id="za_gp_a", name="Zulu Clinic", area_key=early.area_key),
        make_profile(facility_id="za_gp_b", name="Alpha Clinic", area_key=late.area_key),
    ]
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot([early, late]))
    assert [a.facility_name for a in page.alerts] == ["Zulu Clinic", "Alpha Clinic"]


def test_facilities_outside_windows_produce_no_alerts():
    entries, profiles = _fleet([4, 4])
    page = alert_aggregator.active_alerts(profiles, at(19, 10), make_snapshot(entries))
    assert page.alerts == []
    assert page.overflow == 0


def test_alert_carries_window_and_backup_status():
    entries, profiles = _fleet([4])
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries))
    alert = page.alerts[0]
    assert alert.stage == Stage.STAGE_4
    assert alert.outage_start == at(19, 8)
    assert alert.outage_end == at(19, 10)
    assert alert.backup_status == BackupPowerStatus.PARTIAL
    assert alert.id == f"outage_za_gp_fac_000_{int(at(19, 8).timestamp())}"


def test_unknown_area_is_skipped():
    entries, profiles = _fleet([4])
    profiles.append(make_profile(facility_id="za_wc_x", name="Nowhere", area_key="nowhere:nothing"))
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries))
    assert [a.facility_id for a in page.alerts] == ["za_gp_fac_000"]


def test_one_failing_facility_does_not_abort_the_rest(monkeypatch):
    entries, profiles = _fleet([4, 5])
    bad_key = entries[1].area_key
    real_resolve = alert_aggregator.resolve_windows

    def flaky_resolve(entry, from_time, horizon):
        if entry.area_key == bad_key:
            raise RuntimeError("corrupt schedule")
        return real_resolve(entry, from_time, horizon)

    monkeypatch.setattr(alert_aggregator, "resolve_windows", flaky_resolve)
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries))
    assert [a.facility_id for a in page.alerts] == ["za_gp_fac_000"]


def test_zero_limit_reports_everything_as_overflow():
    entries, profiles = _fleet([3, 3, 3])
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries), limit=0)
    assert page.alerts == []
    assert page.overflow == 3


def test_highest_stage_counts_alerts_beyond_the_cap():
    entries, profiles = _fleet([2, 6, 3])
    page = alert_aggregator.active_alerts(profiles, at(19, 9), make_snapshot(entries), limit=0)
    assert page.alerts == []
    assert page.highest_stage == Stage.STAGE_6
