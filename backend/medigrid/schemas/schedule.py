import re
from datetime import datetime, time
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class RiskTier(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = [RiskTier.LOW, RiskTier.MODERATE, RiskTier.HIGH, RiskTier.CRITICAL]


class Stage(IntEnum):
    STAGE_0 = 0
    STAGE_1 = 1
    STAGE_2 = 2
    STAGE_3 = 3
    STAGE_4 = 4
    STAGE_5 = 5
    STAGE_6 = 6
    STAGE_7 = 7
    STAGE_8 = 8

    @property
    def label(self) -> str:
        return "No Load Shedding" if self == 0 else f"Stage {int(self)}"

    @property
    def risk_tier(self) -> RiskTier:
        return _STAGE_INFO[self][0]

    @property
    def description(self) -> str:
        return _STAGE_INFO[self][1]

    @property
    def daily_hours(self) -> int:
        return _STAGE_INFO[self][2]


# stage -> (risk tier, description, typical hours shed per day)
_STAGE_INFO: dict[int, tuple[RiskTier, str, int]] = {
    0: (RiskTier.LOW, "Normal power supply", 0),
    1: (RiskTier.LOW, "Low impact - 2-3 hours daily", 2),
    2: (RiskTier.MODERATE, "Moderate impact - 4-6 hours daily", 5),
    3: (RiskTier.HIGH, "High impact - 6-8 hours daily", 7),
    4: (RiskTier.CRITICAL, "Severe impact - 8-12 hours daily", 10),
    5: (RiskTier.CRITICAL, "Critical impact - 10-14 hours daily", 12),
    6: (RiskTier.CRITICAL, "Extreme impact - 12+ hours daily", 14),
    7: (RiskTier.CRITICAL, "Extreme impact - 14+ hours daily", 16),
    8: (RiskTier.CRITICAL, "Extreme impact - 16+ hours daily", 18),
}


def area_key(municipality: str, area: str) -> str:
    """Stable lookup key for an area, e.g. ``city-of-johannesburg:soweto``."""
    return f"{_slug(municipality)}:{_slug(area)}"


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.casefold()).strip("-")


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_of_week: int = Field(ge=1, le=7)  # 1 = Monday ... 7 = Sunday
    start: time
    end: time
    stage: int = Field(default=1, ge=1, le=8)  # lowest stage at which this slot sheds

    @model_validator(mode="after")
    def _check_order(self):
        if self.start >= self.end:
            raise ValueError(f"slot start {self.start} must be before end {self.end}")
        return self

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return (self.end.hour * 60 + self.end.minute) - (self.start.hour * 60 + self.start.minute)


class ScheduleEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    municipality: str
    province: str = ""
    area: str
    block: str
    external_id: str = ""
    stage: Stage = Stage.STAGE_0
    time_slots: tuple[TimeSlot, ...] = ()
    emergency_contacts: tuple[str, ...] = ()
    last_updated: datetime | None = None

    @computed_field
    @property
    def area_key(self) -> str:
        return area_key(self.municipality, self.area)


class OutageWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    stage: Stage

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def contains(self, t: datetime) -> bool:
        # inclusive start, exclusive end
        return self.start <= t < self.end
