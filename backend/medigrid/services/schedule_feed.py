"""Schedule feed parsing: published load-shedding records -> ScheduleEntry list.

The feed is a JSON array of records::

    {"municipality": "City of Johannesburg", "province": "Gauteng",
     "area": "Soweto", "block": "Block 2", "external_id": "JHBSOWETO002",
     "stage": 2, "emergency_contacts": ["011-490-7870"],
     "time_slots": [{"day_of_week": 1, "start": "06:00", "end": "08:00", "stage": 1}]}

A malformed slot (zero-length, inverted, unparseable) is dropped with a
warning. Anything wrong at record or file level fails the whole feed so a
reload never publishes a partial schedule.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from medigrid.errors import MalformedSchedule, ScheduleFeedError
from medigrid.schemas.schedule import ScheduleEntry, Stage, TimeSlot

logger = logging.getLogger(__name__)


class FeedRecord(BaseModel):
    municipality: str = Field(min_length=1)
    province: str = ""
    area: str = Field(min_length=1)
    block: str = Field(min_length=1)
    external_id: str = ""
    stage: Stage = Stage.STAGE_0
    time_slots: list[dict[str, Any]] = []
    emergency_contacts: list[str] = []
    last_updated: str | None = None


def load_feed(path: str | Path) -> list[ScheduleEntry]:
    """Read and parse a feed file. Raises ScheduleFeedError on any structural problem."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ScheduleFeedError(f"Cannot read schedule feed {path}: {e}") from e
    return parse_feed(raw)


def parse_feed(raw: Any) -> list[ScheduleEntry]:
    if isinstance(raw, dict) and "schedules" in raw:
        raw = raw["schedules"]
    if not isinstance(raw, list):
        raise ScheduleFeedError("Schedule feed must be a list of records")

    entries: list[ScheduleEntry] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        try:
            record = FeedRecord.model_validate(item)
        except ValidationError as e:
            raise ScheduleFeedError(f"Schedule record {i} is invalid: {e}") from e

        slots = []
        for slot_raw in record.time_slots:
            try:
                slots.append(parse_slot(slot_raw))
            except MalformedSchedule as e:
                logger.warning(
                    "Dropping malformed slot for %s/%s: %s",
                    record.municipality, record.area, e,
                )

        try:
            entry = ScheduleEntry(
                municipality=record.municipality,
                province=record.province,
                area=record.area,
                block=record.block,
                external_id=record.external_id,
                stage=record.stage,
                time_slots=tuple(sorted(slots, key=lambda s: (s.day_of_week, s.start, s.end))),
                emergency_contacts=tuple(record.emergency_contacts),
                last_updated=record.last_updated,
            )
        except ValidationError as e:
            raise ScheduleFeedError(f"Schedule record {i} is invalid: {e}") from e

        if entry.area_key in seen:
            raise ScheduleFeedError(f"Duplicate schedule for area {entry.area_key}")
        seen.add(entry.area_key)
        entries.append(entry)

    return entries


def parse_slot(raw: Any) -> TimeSlot:
    try:
        return TimeSlot.model_validate(raw)
    except ValidationError as e:
        raise MalformedSchedule(str(e.errors()[0].get("msg", e))) from e
