"""
API Request/Response Schemas

Pydantic models for the HTTP edge. Dates arrive as ISO-8601 strings and are
parsed here; the core only ever sees datetime objects.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from nutricare.core.domain import EducationContext, ProgramSummaryType, SummaryType


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    generation_available: bool


class ReportSectionResponse(BaseModel):
    title: str
    content: str


class NutritionReportResponse(BaseModel):
    patient_id: str
    patient_name: str
    report_date: str
    sections: List[ReportSectionResponse]


class PatientSummaryRequestBody(BaseModel):
    organization_id: str = Field(..., min_length=1)
    professional_id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    type: SummaryType
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None


class SummaryResponse(BaseModel):
    id: str
    organization_id: str
    patient_id: str
    professional_id: str
    type: SummaryType
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    text_for_professional: str
    created_at: str


class ProgramSummaryRequestBody(BaseModel):
    organization_id: str = Field(..., min_length=1)
    program_id: str = Field(..., min_length=1)
    type: ProgramSummaryType = ProgramSummaryType.PROGRAM_OVERVIEW
    meeting_id: Optional[str] = None


class ProgramSummaryResponse(BaseModel):
    id: str
    organization_id: str
    program_id: str
    type: ProgramSummaryType
    meeting_id: Optional[str] = None
    text: str
    created_at: str


class DiagnosisSuggestionRequestBody(BaseModel):
    organization_id: str = Field(..., min_length=1)
    professional_id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    consultation_id: Optional[str] = None


class DiagnosisSuggestionItem(BaseModel):
    title: str
    pes_format: Optional[str] = None
    rationale: str


class DiagnosisSuggestionResponse(BaseModel):
    id: str
    organization_id: str
    patient_id: str
    professional_id: str
    consultation_id: Optional[str] = None
    diagnoses: List[DiagnosisSuggestionItem]
    created_at: str


class EducationMaterialRequestBody(BaseModel):
    organization_id: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    context: EducationContext
    patient_id: Optional[str] = None
    program_id: Optional[str] = None


class EducationMaterialResponse(BaseModel):
    id: str
    organization_id: str
    patient_id: Optional[str] = None
    program_id: Optional[str] = None
    topic: str
    context: EducationContext
    text: str
    created_at: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
