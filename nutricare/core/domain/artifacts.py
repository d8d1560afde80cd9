"""
Generated Artifacts

Write-once records of generated text. Each artifact is created exactly once,
after its generation call succeeded, and is never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class SummaryType(str, Enum):
    """Patient-level summary modes."""
    WEEKLY_OVERVIEW = "WEEKLY_OVERVIEW"
    FULL_HISTORY = "FULL_HISTORY"
    PRE_CONSULT = "PRE_CONSULT"


class ProgramSummaryType(str, Enum):
    """Program-level summary modes."""
    PROGRAM_OVERVIEW = "PROGRAM_OVERVIEW"
    MEETING_SUMMARY = "MEETING_SUMMARY"


class EducationContext(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    GROUP = "GROUP"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class SummaryArtifact:
    id: str
    organization_id: str
    patient_id: str
    professional_id: str
    type: SummaryType
    text: str
    created_at: datetime
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "patient_id": self.patient_id,
            "professional_id": self.professional_id,
            "type": self.type.value,
            "period_start": _iso(self.period_start),
            "period_end": _iso(self.period_end),
            "text_for_professional": self.text,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ProgramSummaryArtifact:
    id: str
    organization_id: str
    program_id: str
    type: ProgramSummaryType
    text: str
    created_at: datetime
    meeting_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "program_id": self.program_id,
            "type": self.type.value,
            "meeting_id": self.meeting_id,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class DiagnosisSuggestion:
    """One suggested nutrition diagnosis, PES-formatted when applicable."""
    title: str
    rationale: str
    pes_format: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "pes_format": self.pes_format,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class DiagnosisSuggestionArtifact:
    id: str
    organization_id: str
    patient_id: str
    professional_id: str
    diagnoses: Tuple[DiagnosisSuggestion, ...]
    created_at: datetime
    consultation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "patient_id": self.patient_id,
            "professional_id": self.professional_id,
            "consultation_id": self.consultation_id,
            "diagnoses": [d.to_dict() for d in self.diagnoses],
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class EducationMaterialArtifact:
    id: str
    organization_id: str
    topic: str
    context: EducationContext
    text: str
    created_at: datetime
    patient_id: Optional[str] = None
    program_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "patient_id": self.patient_id,
            "program_id": self.program_id,
            "topic": self.topic,
            "context": self.context.value,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }
