from datetime import datetime

from pydantic import BaseModel, ConfigDict

from medigrid.schemas.facility import BackupPowerStatus, CriticalEquipment
from medigrid.schemas.schedule import OutageWindow, RiskTier, Stage


class RankedEquipment(BaseModel):
    model_config = ConfigDict(frozen=True)

    rank: int
    equipment: CriticalEquipment
    outage_minutes: int | None = None
    margin_minutes: int | None = None  # runtime - outage duration
    survives: bool | None = None


class PowerRiskAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    facility_id: str
    assessed_at: datetime
    current_risk: RiskTier = RiskTier.LOW
    current_stage: Stage = Stage.STAGE_0
    backup_power_ready: bool = False
    active_outage: OutageWindow | None = None
    next_outage: OutageWindow | None = None
    survivability_margin_minutes: int | None = None
    schedule_available: bool = True
    stale_data: bool = False
    recommendations: tuple[str, ...] = ()


class PowerOutageAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    facility_id: str
    facility_name: str
    stage: Stage
    outage_start: datetime
    outage_end: datetime
    backup_status: BackupPowerStatus


class AlertPage(BaseModel):
    as_of: datetime
    alerts: list[PowerOutageAlert] = []
    overflow: int = 0  # active alerts beyond the cap
    total_active: int = 0
    highest_stage: Stage = Stage.STAGE_0  # across all active alerts, not just this page


class EmergencyProtocol(BaseModel):
    facility_id: str
    stage: Stage
    risk_tier: RiskTier
    actions: list[str] = []
    contact_numbers: list[str] = []
    evacuation_plan: str | None = None
    medical_emergency_procedure: str


class StageStatus(BaseModel):
    area_key: str
    at: datetime
    stage: Stage
    label: str
    description: str
    risk_tier: RiskTier
    active_outage: OutageWindow | None = None
