"""
Domain Layer

Entities, generated artifacts and the data-access contracts the
aggregation core depends on.
"""
from .entities import (
    Sex,
    ConsultationType,
    LabTestType,
    MealType,
    ProgramStatus,
    NumericValue,
    RawValue,
    LabValue,
    parse_lab_value,
    format_number,
    Patient,
    AnthropometryRecord,
    LabResult,
    Consultation,
    NutritionPlan,
    NutritionPlanMeal,
    GeneralGuidance,
    Program,
    ProgramParticipant,
    ProgramMeeting,
    MeetingRecord,
)
from .artifacts import (
    SummaryType,
    ProgramSummaryType,
    EducationContext,
    SummaryArtifact,
    ProgramSummaryArtifact,
    DiagnosisSuggestion,
    DiagnosisSuggestionArtifact,
    EducationMaterialArtifact,
)
from .accessors import (
    ClinicalDataAccessors,
    SummaryPersistence,
    DateRange,
    RequestContext,
    as_utc,
)

__all__ = [
    "Sex",
    "ConsultationType",
    "LabTestType",
    "MealType",
    "ProgramStatus",
    "NumericValue",
    "RawValue",
    "LabValue",
    "parse_lab_value",
    "format_number",
    "Patient",
    "AnthropometryRecord",
    "LabResult",
    "Consultation",
    "NutritionPlan",
    "NutritionPlanMeal",
    "GeneralGuidance",
    "Program",
    "ProgramParticipant",
    "ProgramMeeting",
    "MeetingRecord",
    "SummaryType",
    "ProgramSummaryType",
    "EducationContext",
    "SummaryArtifact",
    "ProgramSummaryArtifact",
    "DiagnosisSuggestion",
    "DiagnosisSuggestionArtifact",
    "EducationMaterialArtifact",
    "ClinicalDataAccessors",
    "SummaryPersistence",
    "DateRange",
    "RequestContext",
    "as_utc",
]
