from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BackupPowerStatus(str, Enum):
    """Backup power readiness, declared in order of decreasing reliability."""
    FULLY_OPERATIONAL = "FULLY_OPERATIONAL"
    PARTIAL = "PARTIAL"
    MINIMAL = "MINIMAL"
    NONE = "NONE"
    MAINTENANCE_REQUIRED = "MAINTENANCE_REQUIRED"

    @property
    def reliability_rank(self) -> int:
        return list(BackupPowerStatus).index(self)


class EquipmentPriority(str, Enum):
    """Precedence tiers, LIFE_SUPPORT first."""
    LIFE_SUPPORT = "LIFE_SUPPORT"
    CRITICAL_CARE = "CRITICAL_CARE"
    DIAGNOSTIC = "DIAGNOSTIC"
    SUPPORT = "SUPPORT"
    NON_ESSENTIAL = "NON_ESSENTIAL"

    @property
    def precedence(self) -> int:
        return list(EquipmentPriority).index(self)


class FacilityType(str, Enum):
    NATIONAL_HOSPITAL = "NATIONAL_HOSPITAL"
    PROVINCIAL_HOSPITAL = "PROVINCIAL_HOSPITAL"
    REGIONAL_HOSPITAL = "REGIONAL_HOSPITAL"
    DISTRICT_HOSPITAL = "DISTRICT_HOSPITAL"
    PRIVATE_HOSPITAL = "PRIVATE_HOSPITAL"
    COMMUNITY_HEALTH_CENTER = "COMMUNITY_HEALTH_CENTER"
    PRIMARY_CLINIC = "PRIMARY_CLINIC"
    OTHER = "OTHER"


class CriticalEquipment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    power_draw_watts: int = Field(ge=0)
    runtime_minutes: int = Field(ge=0)  # on battery/UPS alone
    priority: EquipmentPriority
    alternative_power: bool = False


class Facility(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    latitude: float | None = None
    longitude: float | None = None
    province: str = ""
    area_key: str = ""  # filled from the facility id prefix when empty
    facility_type: FacilityType = FacilityType.OTHER
    phone_number: str = ""


class FacilityProfile(BaseModel):
    """A facility together with what the risk engine needs to know about it."""
    model_config = ConfigDict(frozen=True)

    facility: Facility
    backup_status: BackupPowerStatus = BackupPowerStatus.NONE
    equipment: tuple[CriticalEquipment, ...] = ()


class FacilityRegistration(BaseModel):
    facility: Facility
    backup_status: BackupPowerStatus = BackupPowerStatus.NONE
    equipment: list[CriticalEquipment] = []


class BackupStatusUpdate(BaseModel):
    backup_status: BackupPowerStatus
