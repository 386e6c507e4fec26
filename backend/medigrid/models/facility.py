from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medigrid.database import Base


class FacilityRecord(Base):
    """Registered healthcare facility and its current backup power status."""
    __tablename__ = "facilities"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    province = Column(String(60), default="")
    area_key = Column(String(120), nullable=False, index=True)
    facility_type = Column(String(40), nullable=False)
    phone_number = Column(String(40), default="")
    backup_status = Column(String(30), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    equipment = relationship(
        "EquipmentRecord",
        back_populates="facility",
        cascade="all, delete-orphan",
        order_by="EquipmentRecord.id",
    )


class EquipmentRecord(Base):
    """One piece of critical equipment; owned by exactly one facility."""
    __tablename__ = "critical_equipment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    facility_id = Column(String(64), ForeignKey("facilities.id"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    power_draw_watts = Column(Integer, nullable=False)
    runtime_minutes = Column(Integer, nullable=False)
    priority = Column(String(20), nullable=False)
    alternative_power = Column(Boolean, default=False)

    facility = relationship("FacilityRecord", back_populates="equipment")
