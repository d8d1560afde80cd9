"""
Education Material Payload Builder

Context for generating patient-education material on a topic:
- INDIVIDUAL: name, age, sex and clinical conditions of one patient
- GROUP: name, description and target audience of one program

Either side may be absent; the topic alone is a valid request.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from nutricare.core.domain.artifacts import EducationContext
from nutricare.core.domain.entities import Patient, Program, Sex
from nutricare.core.metrics import CONDITION_KEYWORDS, age


@dataclass(frozen=True)
class EducationPatientInfo:
    name: str
    age: int
    sex: Sex
    clinical_conditions: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "age": self.age,
            "sex": self.sex.value,
            "clinical_conditions": list(self.clinical_conditions),
        }


@dataclass(frozen=True)
class EducationProgramInfo:
    name: str
    description: Optional[str]
    target_audience: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "target_audience": self.target_audience,
        }


@dataclass
class EducationPayload:
    topic: str
    context: EducationContext
    patient_info: Optional[EducationPatientInfo] = None
    program_info: Optional[EducationProgramInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "context": self.context.value,
            "patient_info": self.patient_info.to_dict() if self.patient_info else None,
            "program_info": self.program_info.to_dict() if self.program_info else None,
        }


def clinical_conditions(tags: List[str]) -> List[str]:
    """Tags naming one of the tracked chronic conditions, verbatim."""
    return [
        tag for tag in tags
        if any(keyword in tag.lower() for keyword in CONDITION_KEYWORDS)
    ]


class EducationMaterialBuilder:
    def build(
        self,
        topic: str,
        context: EducationContext,
        today: date,
        patient: Optional[Patient] = None,
        program: Optional[Program] = None,
    ) -> EducationPayload:
        patient_info = None
        if patient is not None:
            patient_info = EducationPatientInfo(
                name=patient.full_name,
                age=age(patient.birth_date, today),
                sex=patient.sex,
                clinical_conditions=clinical_conditions(patient.tags),
            )

        program_info = None
        if program is not None:
            program_info = EducationProgramInfo(
                name=program.name,
                description=program.description,
                target_audience=(
                    f"{len(program.participants)} participantes do programa {program.name}"
                ),
            )

        return EducationPayload(
            topic=topic,
            context=context,
            patient_info=patient_info,
            program_info=program_info,
        )
