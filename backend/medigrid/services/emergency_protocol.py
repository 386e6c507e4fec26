"""Emergency protocol for a facility facing load shedding.

Actions scale with the stage's risk tier; an evacuation plan is only issued at
CRITICAL tier. Contacts combine national numbers, the area's published
emergency contacts and the facility's own line.
"""

from medigrid.config import settings
from medigrid.schemas.facility import FacilityProfile
from medigrid.schemas.risk import EmergencyProtocol
from medigrid.schemas.schedule import RiskTier, ScheduleEntry, Stage

LOW_ACTIONS = [
    "Check backup generator fuel levels",
    "Test UPS systems",
    "Prepare emergency lighting",
    "Inform staff of upcoming outage",
]

MODERATE_ACTIONS = [
    "Activate backup generator 15 minutes before outage",
    "Switch critical equipment to UPS",
    "Prepare manual procedures for power-dependent processes",
    "Restrict non-essential electricity usage",
    "Brief medical staff on emergency procedures",
]

SEVERE_ACTIONS = [
    "Activate full emergency power protocol",
    "Prioritize life-support equipment",
    "Consider transferring non-critical patients",
    "Implement manual documentation systems",
    "Activate emergency communication protocols",
    "Consider postponing elective procedures",
    "Prepare for extended outage duration",
]

EVACUATION_PLAN = (
    "Prepare vertical evacuation plan for ventilator-dependent patients "
    "to facilities with reliable backup power"
)

MEDICAL_PROCEDURE = (
    "Maintain life-support systems on backup power. Manual ventilation "
    "protocols ready. Emergency medications prepared."
)


def build_protocol(
    profile: FacilityProfile,
    stage: Stage,
    entry: ScheduleEntry | None = None,
) -> EmergencyProtocol:
    tier = stage.risk_tier
    if tier == RiskTier.LOW:
        actions = LOW_ACTIONS
    elif tier == RiskTier.MODERATE:
        actions = MODERATE_ACTIONS
    else:
        actions = SEVERE_ACTIONS

    contacts = list(settings.national_contact_list)
    if entry is not None:
        contacts.extend(f"{entry.municipality}: {c}" for c in entry.emergency_contacts)
    if profile.facility.phone_number:
        contacts.append(f"Facility: {profile.facility.phone_number}")

    return EmergencyProtocol(
        facility_id=profile.facility.id,
        stage=stage,
        risk_tier=tier,
        actions=list(actions),
        contact_numbers=contacts,
        evacuation_plan=EVACUATION_PLAN if tier == RiskTier.CRITICAL else None,
        medical_emergency_procedure=MEDICAL_PROCEDURE,
    )
