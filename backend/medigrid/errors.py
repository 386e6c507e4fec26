"""Error taxonomy for the power-outage engine.

None of these are fatal to the process: routers translate ``NotFound`` into a
404, malformed slots are dropped at parse time, and a failed feed reload
leaves the previous schedule snapshot in place.
"""


class MediGridError(Exception):
    pass


class NotFound(MediGridError):
    """Unknown facility or area key. Surfaced to the caller, not retried."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class DuplicateFacility(MediGridError):
    def __init__(self, facility_id: str):
        super().__init__(f"Facility {facility_id} already registered")
        self.facility_id = facility_id


class MalformedSchedule(MediGridError):
    """A time slot that cannot be materialised (zero-length, inverted, unparseable)."""


class ScheduleFeedError(MediGridError):
    """The feed as a whole could not be loaded; the old snapshot stays visible."""
