from datetime import datetime

from fastapi import Depends

from medigrid.services.clock import Clock, get_clock, localize


def resolve_at(at: datetime | None = None, clock: Clock = Depends(get_clock)) -> datetime:
    """The ``at`` query parameter if given, else the injected clock's time."""
    return localize(at) if at is not None else clock.now()
