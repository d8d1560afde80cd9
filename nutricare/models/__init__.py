"""
HTTP schemas.
"""
from .api import (
    HealthResponse,
    ReportSectionResponse,
    NutritionReportResponse,
    PatientSummaryRequestBody,
    SummaryResponse,
    ProgramSummaryRequestBody,
    ProgramSummaryResponse,
    DiagnosisSuggestionRequestBody,
    DiagnosisSuggestionItem,
    DiagnosisSuggestionResponse,
    EducationMaterialRequestBody,
    EducationMaterialResponse,
    ErrorResponse,
)

__all__ = [
    "HealthResponse",
    "ReportSectionResponse",
    "NutritionReportResponse",
    "PatientSummaryRequestBody",
    "SummaryResponse",
    "ProgramSummaryRequestBody",
    "ProgramSummaryResponse",
    "DiagnosisSuggestionRequestBody",
    "DiagnosisSuggestionItem",
    "DiagnosisSuggestionResponse",
    "EducationMaterialRequestBody",
    "EducationMaterialResponse",
    "ErrorResponse",
]
