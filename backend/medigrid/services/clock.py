"""Injectable clock. Engine functions take ``now`` explicitly; the API asks a Clock."""

from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from medigrid.config import settings


def schedule_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def localize(t: datetime) -> datetime:
    """Naive timestamps are read as schedule-local wall-clock time."""
    tz = schedule_tz()
    if t.tzinfo is None:
        return t.replace(tzinfo=tz)
    return t.astimezone(tz)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(schedule_tz())


class FixedClock:
    def __init__(self, at: datetime):
        self.at = localize(at)

    def now(self) -> datetime:
        return self.at


_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _clock
