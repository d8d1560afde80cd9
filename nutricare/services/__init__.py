"""
Use-Case Services

One orchestrator per use-case. Each call receives an explicit
RequestContext; no service keeps state between calls.
"""
from .common import Clock, utc_now, require_patient, require_program
from .nutrition_report import NutritionReportService
from .patient_summary import PatientSummaryService, PatientSummaryRequest
from .program_summary import ProgramSummaryService, ProgramSummaryRequest
from .diagnosis_suggestions import DiagnosisSuggestionService, DiagnosisSuggestionRequest
from .education_material import EducationMaterialService, EducationMaterialRequest

__all__ = [
    "Clock",
    "utc_now",
    "require_patient",
    "require_program",
    "NutritionReportService",
    "PatientSummaryService",
    "PatientSummaryRequest",
    "ProgramSummaryService",
    "ProgramSummaryRequest",
    "DiagnosisSuggestionService",
    "DiagnosisSuggestionRequest",
    "EducationMaterialService",
    "EducationMaterialRequest",
]
