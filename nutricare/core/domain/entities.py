"""
Clinical Domain Entities

Read-only snapshots of the records the aggregation pipeline consumes.
Every entity is scoped by organization; the accessors enforce that scope.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Sex(str, Enum):
    """Biological-sex category recorded for a patient."""
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class ConsultationType(str, Enum):
    INITIAL = "INITIAL"
    FOLLOW_UP = "FOLLOW_UP"
    GROUP = "GROUP"
    HOSPITAL = "HOSPITAL"


class LabTestType(str, Enum):
    """Closed set of laboratory test categories."""
    GLYCEMIA = "GLYCEMIA"
    HBA1C = "HBA1C"
    CT = "CT"      # Total cholesterol
    HDL = "HDL"
    LDL = "LDL"
    TG = "TG"      # Triglycerides
    OTHER = "OTHER"


class MealType(str, Enum):
    BREAKFAST = "BREAKFAST"
    MORNING_SNACK = "MORNING_SNACK"
    LUNCH = "LUNCH"
    AFTERNOON_SNACK = "AFTERNOON_SNACK"
    DINNER = "DINNER"
    SUPPER = "SUPPER"
    OTHER = "OTHER"


class ProgramStatus(str, Enum):
    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


# ── Lab values ────────────────────────────────────────────────────────────
# A lab value is numeric when the recorded text is a plain decimal literal.
# Anything else ("<5.7", "5,7", "negativo") is kept verbatim.
_DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def format_number(value: float) -> str:
    """Render a float without a spurious trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass(frozen=True)
class NumericValue:
    value: float

    def render(self) -> str:
        return format_number(self.value)

    def to_json(self) -> float:
        return self.value


@dataclass(frozen=True)
class RawValue:
    text: str

    def render(self) -> str:
        return self.text

    def to_json(self) -> str:
        return self.text


LabValue = Union[NumericValue, RawValue]


def parse_lab_value(raw: Union[int, float, str, NumericValue, RawValue]) -> LabValue:
    """
    Build a LabValue from whatever the storage layer recorded.

    Numbers become NumericValue; strings only when they are a plain decimal
    literal. "nan" and "inf" are deliberately not decimal literals.
    """
    if isinstance(raw, (NumericValue, RawValue)):
        return raw
    if isinstance(raw, bool):
        return RawValue(str(raw).lower())
    if isinstance(raw, (int, float)):
        return NumericValue(float(raw))
    text = str(raw)
    if _DECIMAL_LITERAL.match(text.strip()):
        return NumericValue(float(text.strip()))
    return RawValue(text)


# ── Patient ───────────────────────────────────────────────────────────────

@dataclass
class Patient:
    id: str
    organization_id: str
    full_name: str
    birth_date: date
    sex: Sex
    email: Optional[str] = None
    phone: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class AnthropometryRecord:
    """One body-measurement session."""
    id: str
    patient_id: str
    date: datetime
    weight_kg: Optional[float] = None
    height_m: Optional[float] = None
    bmi: Optional[float] = None
    waist_circumference: Optional[float] = None
    hip_circumference: Optional[float] = None
    arm_circumference: Optional[float] = None
    notes: Optional[str] = None


@dataclass
class LabResult:
    id: str
    patient_id: str
    date: datetime
    test_type: LabTestType
    name: str
    value: LabValue
    unit: str
    reference_range: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class Consultation:
    id: str
    patient_id: str
    professional_id: str
    date_time: datetime
    type: ConsultationType
    main_complaint: Optional[str] = None
    nutrition_history: Optional[str] = None
    nutrition_diagnosis: Optional[str] = None
    plan: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class NutritionPlanMeal:
    meal_type: MealType
    description: str
    observation: Optional[str] = None


@dataclass
class NutritionPlan:
    id: str
    patient_id: str
    title: str
    goals: str
    is_active: bool = True
    notes: Optional[str] = None
    meals: List[NutritionPlanMeal] = field(default_factory=list)


@dataclass
class GeneralGuidance:
    """General conduct recommendations issued alongside a plan."""
    id: str
    patient_id: str
    date: datetime
    hydration_guidance: Optional[str] = None
    physical_activity_guidance: Optional[str] = None
    sleep_guidance: Optional[str] = None
    symptom_management_guidance: Optional[str] = None
    notes: Optional[str] = None


# ── Group programs ────────────────────────────────────────────────────────

@dataclass
class ProgramParticipant:
    patient_id: str
    join_date: datetime
    leave_date: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass
class MeetingRecord:
    """Per-participant record taken at one program meeting."""
    patient_id: str
    presence: bool
    weight_kg: Optional[float] = None
    bmi: Optional[float] = None
    blood_pressure_systolic: Optional[int] = None
    blood_pressure_diastolic: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class ProgramMeeting:
    id: str
    date: datetime
    topic: str
    notes: Optional[str] = None
    records: List[MeetingRecord] = field(default_factory=list)


@dataclass
class Program:
    id: str
    organization_id: str
    name: str
    description: str
    status: ProgramStatus = ProgramStatus.PLANNED
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    participants: List[ProgramParticipant] = field(default_factory=list)
    meetings: List[ProgramMeeting] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
