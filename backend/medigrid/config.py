from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field

DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "MEDIGRID_"}

    # Database (facility registry)
    database_url: str = Field(default="sqlite:///./medigrid.db")

    # Schedule feed
    schedule_feed_path: str = Field(default=str(DATA_DIR / "schedules.json"))
    schedule_refresh_interval: int = Field(default=60)  # minutes
    stale_after_minutes: int = Field(default=24 * 60)

    # Published schedules are wall-clock times in this zone
    timezone: str = Field(default="Africa/Johannesburg")

    # Alert aggregation
    alert_limit: int = Field(default=5)

    # Risk assessment thresholds
    assessment_horizon_hours: int = Field(default=7 * 24)
    high_risk_lead_minutes: int = Field(default=120)
    moderate_lookahead_hours: int = Field(default=24)
    moderate_stage_threshold: int = Field(default=3)
    emergency_protocol_stage: int = Field(default=5)
    upcoming_window_hours: int = Field(default=24)

    # National numbers prepended to every emergency protocol
    national_emergency_contacts: str = Field(
        default="Emergency Services: 10177,Eskom Fault Reporting: 086-003-7566"
    )

    log_level: str = Field(default="INFO")

    # CORS
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def national_contact_list(self) -> list[str]:
        return [c.strip() for c in self.national_emergency_contacts.split(",") if c.strip()]


settings = Settings()
