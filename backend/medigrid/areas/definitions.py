from dataclasses import dataclass

from medigrid.schemas.schedule import area_key


@dataclass(frozen=True)
class AreaDefinition:
    municipality: str
    province: str
    area: str
    province_code: str  # prefix used in facility ids, e.g. za_gp_

    @property
    def key(self) -> str:
        return area_key(self.municipality, self.area)


# Default supply area per province, used when a facility registers without one
PROVINCE_DEFAULT_AREAS = [
    AreaDefinition("City of Johannesburg", "Gauteng", "Johannesburg Central", "gp"),
    AreaDefinition("City of Cape Town", "Western Cape", "Cape Town CBD", "wc"),
    AreaDefinition("eThekwini Municipality", "KwaZulu-Natal", "Durban Central", "kzn"),
    AreaDefinition("Nelson Mandela Bay Municipality", "Eastern Cape", "Port Elizabeth Central", "ec"),
    AreaDefinition("Mangaung Metropolitan Municipality", "Free State", "Bloemfontein", "fs"),
    AreaDefinition("Polokwane Municipality", "Limpopo", "Polokwane Central", "lp"),
    AreaDefinition("City of Mbombela", "Mpumalanga", "Nelspruit", "mp"),
    AreaDefinition("Mahikeng Municipality", "North West", "Mahikeng Central", "nw"),
    AreaDefinition("Sol Plaatje Municipality", "Northern Cape", "Kimberley", "nc"),
]


def default_area_for_facility(facility_id: str) -> AreaDefinition | None:
    """Map a ``za_<province>_...`` facility id to its province's default area."""
    parts = facility_id.lower().split("_")
    if len(parts) < 2 or parts[0] != "za":
        return None
    for area in PROVINCE_DEFAULT_AREAS:
        if area.province_code == parts[1]:
            return area
    return None
