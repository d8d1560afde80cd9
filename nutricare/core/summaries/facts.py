"""
Payload Fact Types

Field projections of domain records as they are handed to the generation
gateway. Internal ids of measurement records are dropped; values are
otherwise passed through untouched.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from nutricare.core.domain.entities import (
    AnthropometryRecord,
    LabResult,
    LabTestType,
    LabValue,
    Patient,
    Sex,
)
from nutricare.core.metrics import age, extract_diagnoses


@dataclass(frozen=True)
class PatientFacts:
    """Immutable patient snapshot for one aggregation call."""
    id: str
    name: str
    sex: Sex
    age: int
    clinical_diagnoses: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    notes: Optional[str] = None

    @classmethod
    def from_patient(cls, patient: Patient, today: date) -> "PatientFacts":
        return cls(
            id=patient.id,
            name=patient.full_name,
            sex=patient.sex,
            age=age(patient.birth_date, today),
            clinical_diagnoses=extract_diagnoses(patient.tags, patient.notes),
            tags=list(patient.tags),
            notes=patient.notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sex": self.sex.value,
            "approximate_age": self.age,
            "clinical_diagnoses": list(self.clinical_diagnoses),
        }


@dataclass(frozen=True)
class AnthropometryPoint:
    date: datetime
    weight_kg: Optional[float] = None
    height_m: Optional[float] = None
    bmi: Optional[float] = None
    waist_circumference: Optional[float] = None
    hip_circumference: Optional[float] = None
    arm_circumference: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_record(cls, record: AnthropometryRecord) -> "AnthropometryPoint":
        return cls(
            date=record.date,
            weight_kg=record.weight_kg,
            height_m=record.height_m,
            bmi=record.bmi,
            waist_circumference=record.waist_circumference,
            hip_circumference=record.hip_circumference,
            arm_circumference=record.arm_circumference,
            notes=record.notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "weight_kg": self.weight_kg,
            "height_m": self.height_m,
            "bmi": self.bmi,
            "waist_circumference": self.waist_circumference,
            "hip_circumference": self.hip_circumference,
            "arm_circumference": self.arm_circumference,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class LabPoint:
    date: datetime
    test_type: LabTestType
    name: str
    value: LabValue
    unit: str
    reference_range: Optional[str] = None

    @classmethod
    def from_result(cls, result: LabResult) -> "LabPoint":
        return cls(
            date=result.date,
            test_type=result.test_type,
            name=result.name,
            value=result.value,
            unit=result.unit,
            reference_range=result.reference_range,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "test_type": self.test_type.value,
            "name": self.name,
            "value": self.value.to_json(),
            "unit": self.unit,
            "reference_range": self.reference_range,
        }
