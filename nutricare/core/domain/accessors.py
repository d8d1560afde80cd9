"""
Data Access Contracts

The aggregation core reads through ClinicalDataAccessors and writes generated
artifacts through SummaryPersistence. Both are implemented outside the core
(see nutricare.infra). All list methods return records newest-first.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from .entities import (
    AnthropometryRecord,
    Consultation,
    GeneralGuidance,
    LabResult,
    NutritionPlan,
    Patient,
    Program,
)
from .artifacts import (
    DiagnosisSuggestion,
    DiagnosisSuggestionArtifact,
    EducationContext,
    EducationMaterialArtifact,
    ProgramSummaryArtifact,
    ProgramSummaryType,
    SummaryArtifact,
    SummaryType,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a datetime to timezone-aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class RequestContext:
    """Tenant and acting professional for one request."""
    organization_id: str
    professional_id: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    """Optional inclusive period; either bound may be absent."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < as_utc(self.start):
            return False
        if self.end is not None and moment > as_utc(self.end):
            return False
        return True


class ClinicalDataAccessors(Protocol):
    """Read-only fetch functions per entity type."""

    async def find_patient(self, patient_id: str, organization_id: str) -> Optional[Patient]:
        ...

    async def list_anthropometry(
        self,
        patient_id: str,
        organization_id: str,
        period: Optional[DateRange] = None,
    ) -> List[AnthropometryRecord]:
        ...

    async def list_lab_results(
        self,
        patient_id: str,
        organization_id: str,
        period: Optional[DateRange] = None,
    ) -> List[LabResult]:
        ...

    async def list_consultations(
        self,
        organization_id: str,
        patient_id: Optional[str] = None,
        period: Optional[DateRange] = None,
    ) -> List[Consultation]:
        ...

    async def find_active_nutrition_plan(
        self, patient_id: str, organization_id: str
    ) -> Optional[NutritionPlan]:
        ...

    async def find_latest_guidance(
        self, patient_id: str, organization_id: str
    ) -> Optional[GeneralGuidance]:
        ...

    async def find_program(self, program_id: str, organization_id: str) -> Optional[Program]:
        ...


class SummaryPersistence(Protocol):
    """Append-only storage for generated artifacts."""

    async def persist_summary(
        self,
        *,
        organization_id: str,
        patient_id: str,
        professional_id: str,
        summary_type: SummaryType,
        text: str,
        period: Optional[DateRange] = None,
    ) -> SummaryArtifact:
        ...

    async def persist_program_summary(
        self,
        *,
        organization_id: str,
        program_id: str,
        summary_type: ProgramSummaryType,
        text: str,
        meeting_id: Optional[str] = None,
    ) -> ProgramSummaryArtifact:
        ...

    async def persist_diagnosis_suggestion(
        self,
        *,
        organization_id: str,
        patient_id: str,
        professional_id: str,
        diagnoses: Sequence[DiagnosisSuggestion],
        consultation_id: Optional[str] = None,
    ) -> DiagnosisSuggestionArtifact:
        ...

    async def persist_education_material(
        self,
        *,
        organization_id: str,
        topic: str,
        context: EducationContext,
        text: str,
        patient_id: Optional[str] = None,
        program_id: Optional[str] = None,
    ) -> EducationMaterialArtifact:
        ...

    async def list_summaries(
        self,
        organization_id: str,
        patient_id: str,
        summary_type: Optional[SummaryType] = None,
        created: Optional[DateRange] = None,
    ) -> List[SummaryArtifact]:
        ...

    async def list_program_summaries(
        self,
        organization_id: str,
        program_id: str,
        summary_type: Optional[ProgramSummaryType] = None,
        meeting_id: Optional[str] = None,
    ) -> List[ProgramSummaryArtifact]:
        ...
