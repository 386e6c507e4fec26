from fastapi import APIRouter, Query

from medigrid.areas.definitions import PROVINCE_DEFAULT_AREAS

router = APIRouter(prefix="/areas", tags=["areas"])


@router.get("/defaults/")
async def list_default_areas(province: str | None = Query(None)):
    """Default supply area per province, used for facilities registered without one."""
    areas = PROVINCE_DEFAULT_AREAS
    if province:
        areas = [a for a in areas if a.province.casefold() == province.casefold()]
    return [
        {
            "area_key": a.key,
            "municipality": a.municipality,
            "province": a.province,
            "area": a.area,
            "facility_id_prefix": f"za_{a.province_code}_",
        }
        for a in areas
    ]
