"""Stage resolver: materialise a block's published schedule into outage windows.

Stage/block rule: every slot belongs to a rotation stage, and a block sheds
in all slots whose stage is at or below the block's published stage (higher
stages add slots on top of lower ones). Each window carries the published
stage. A block at stage 0 has no windows.

Windows use inclusive start and exclusive end.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta

from medigrid.schemas.schedule import OutageWindow, ScheduleEntry, Stage, TimeSlot
from medigrid.services.clock import localize, schedule_tz

logger = logging.getLogger(__name__)


def resolve_windows(
    entry: ScheduleEntry,
    from_time: datetime,
    horizon: timedelta,
) -> list[OutageWindow]:
    """Windows overlapping ``[from_time, from_time + horizon]``, ascending, non-overlapping."""
    if entry.stage == Stage.STAGE_0:
        return []

    by_day: dict[int, list[TimeSlot]] = defaultdict(list)
    for slot in entry.time_slots:
        if slot.stage <= entry.stage:
            by_day[slot.day_of_week].append(slot)
    if not by_day:
        return []

    tz = schedule_tz()
    range_start = localize(from_time)
    range_end = range_start + horizon

    windows: list[OutageWindow] = []
    day = range_start.date()
    while day <= range_end.date():
        for slot in by_day.get(day.isoweekday(), ()):
            w_start = datetime.combine(day, slot.start, tzinfo=tz)
            w_end = datetime.combine(day, slot.end, tzinfo=tz)
            if w_end > range_start and w_start <= range_end:
                windows.append(OutageWindow(start=w_start, end=w_end, stage=entry.stage))
        day += timedelta(days=1)

    return merge_windows(windows, label=entry.area_key)


def merge_windows(windows: list[OutageWindow], label: str = "") -> list[OutageWindow]:
    """Sort and collapse overlapping windows into their union at the higher stage."""
    merged: list[OutageWindow] = []
    for w in sorted(windows, key=lambda w: (w.start, w.end)):
        if merged and w.start < merged[-1].end:
            prev = merged[-1]
            logger.warning(
                "Overlapping outage windows in %s: %s-%s and %s-%s merged",
                label or "schedule", prev.start, prev.end, w.start, w.end,
            )
            merged[-1] = OutageWindow(
                start=prev.start,
                end=max(prev.end, w.end),
                stage=max(prev.stage, w.stage),
            )
        else:
            merged.append(w)
    return merged


def active_window(windows: list[OutageWindow], t: datetime) -> OutageWindow | None:
    t = localize(t)
    for w in windows:
        if w.contains(t):
            return w
        if w.start > t:
            break
    return None


def next_window(windows: list[OutageWindow], t: datetime) -> OutageWindow | None:
    """The window after the one containing ``t``, or the next future one."""
    t = localize(t)
    current = active_window(windows, t)
    after = current.end if current else t
    for w in windows:
        if w.start >= after:
            return w
    return None


def current_window(entry: ScheduleEntry, t: datetime) -> OutageWindow | None:
    return active_window(resolve_windows(entry, t, timedelta(0)), t)


def current_stage(entry: ScheduleEntry, t: datetime) -> Stage:
    window = current_window(entry, t)
    return window.stage if window else Stage.STAGE_0


def upcoming_windows(entry: ScheduleEntry, t: datetime, hours: int = 24) -> list[OutageWindow]:
    """Windows in progress or starting within the next ``hours``."""
    return resolve_windows(entry, t, timedelta(hours=hours))
