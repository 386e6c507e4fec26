"""Schedule store: the latest published schedule snapshot, swapped atomically.

Readers grab ``store.snapshot()`` once and work against that immutable object,
so a reload running alongside a query is seen entirely or not at all. Only
writers take the lock; reads are a single attribute load.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from medigrid.config import settings
from medigrid.errors import NotFound
from medigrid.schemas.schedule import ScheduleEntry
from medigrid.services import schedule_feed
from medigrid.services.clock import localize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleSnapshot:
    entries: Mapping[str, ScheduleEntry] = field(default_factory=lambda: MappingProxyType({}))
    loaded_at: datetime | None = None
    version: int = 0

    def get(self, area_key: str) -> ScheduleEntry:
        entry = self.entries.get(area_key)
        if entry is None:
            raise NotFound("Area", area_key)
        return entry

    def published_at(self, area_key: str | None = None) -> datetime | None:
        """When the data was published by the feed.

        An entry's ``last_updated`` wins; entries without one fall back to
        ``loaded_at``. Without ``area_key`` this is the oldest entry's time.
        """
        if area_key is not None:
            entry = self.entries.get(area_key)
            return self._entry_published_at(entry) if entry else self.loaded_at
        times = [t for t in map(self._entry_published_at, self.entries.values()) if t is not None]
        return min(times) if times else self.loaded_at

    def is_stale(
        self, now: datetime, max_age: timedelta | None = None, area_key: str | None = None,
    ) -> bool:
        """True when nothing was ever loaded or the data is older than ``max_age``."""
        published = self.published_at(area_key)
        if published is None:
            return True
        if max_age is None:
            max_age = timedelta(minutes=settings.stale_after_minutes)
        return localize(now) - published > max_age

    def _entry_published_at(self, entry: ScheduleEntry) -> datetime | None:
        if entry.last_updated is not None:
            return localize(entry.last_updated)
        return self.loaded_at


class ScheduleStore:
    def __init__(self):
        self._snapshot = ScheduleSnapshot()
        self._write_lock = threading.Lock()

    def snapshot(self) -> ScheduleSnapshot:
        return self._snapshot

    def get_schedule(self, area_key: str) -> ScheduleEntry:
        return self._snapshot.get(area_key)

    def replace(
        self, entries: Iterable[ScheduleEntry], loaded_at: datetime | None = None,
    ) -> ScheduleSnapshot:
        """Publish a new snapshot built from ``entries``."""
        mapping = MappingProxyType({e.area_key: e for e in entries})
        loaded_at = loaded_at or datetime.now(timezone.utc)
        with self._write_lock:
            new = ScheduleSnapshot(
                entries=mapping,
                loaded_at=loaded_at,
                version=self._snapshot.version + 1,
            )
            self._snapshot = new
        logger.info("Schedule snapshot v%d published: %d areas", new.version, len(mapping))
        return new

    def reload(
        self, feed_path: str | Path | None = None, loaded_at: datetime | None = None,
    ) -> ScheduleSnapshot:
        """Parse the feed and publish it. On failure the current snapshot is kept."""
        path = feed_path or settings.schedule_feed_path
        try:
            entries = schedule_feed.load_feed(path)
        except Exception as e:
            logger.error("Schedule reload from %s failed, keeping v%d: %s",
                         path, self._snapshot.version, e)
            raise
        return self.replace(entries, loaded_at=loaded_at)


# Process-wide store used by the API and the reload job
store = ScheduleStore()


def get_store() -> ScheduleStore:
    return store
