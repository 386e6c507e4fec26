"""Equipment prioritizer for load-shedding mitigation.

Order: priority tier (LIFE_SUPPORT first), then power draw descending
(heavier loads drain backup capacity first), then name. The
alternative-power flag never changes the order; it only changes the
recommendation wording.
"""

from medigrid.schemas.facility import CriticalEquipment, EquipmentPriority
from medigrid.schemas.risk import RankedEquipment


def rank(equipment: list[CriticalEquipment] | tuple[CriticalEquipment, ...]) -> list[CriticalEquipment]:
    return sorted(equipment, key=_sort_key)


def assess_survivability(
    equipment: list[CriticalEquipment] | tuple[CriticalEquipment, ...],
    outage_minutes: int | None = None,
) -> list[RankedEquipment]:
    results = []
    for i, item in enumerate(rank(equipment), start=1):
        margin = None if outage_minutes is None else item.runtime_minutes - outage_minutes
        results.append(RankedEquipment(
            rank=i,
            equipment=item,
            outage_minutes=outage_minutes,
            margin_minutes=margin,
            survives=None if margin is None else margin >= 0,
        ))
    return results


def survivability_margin(
    equipment: list[CriticalEquipment] | tuple[CriticalEquipment, ...],
    outage_minutes: int | None,
) -> int | None:
    """Shortest life-support runtime (critical-care if none) minus the outage length.

    None when there is no outage to bridge or no equipment in either tier.
    """
    if outage_minutes is None:
        return None
    runtimes = _runtimes(equipment, EquipmentPriority.LIFE_SUPPORT)
    if not runtimes:
        runtimes = _runtimes(equipment, EquipmentPriority.CRITICAL_CARE)
    if not runtimes:
        return None
    return min(runtimes) - outage_minutes


def _runtimes(equipment, tier: EquipmentPriority) -> list[int]:
    return [e.runtime_minutes for e in equipment if e.priority == tier]


def _sort_key(item: CriticalEquipment) -> tuple[int, int, str]:
    return (item.priority.precedence, -item.power_draw_watts, item.name)
