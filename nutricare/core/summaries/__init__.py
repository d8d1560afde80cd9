"""
Summary Payload Builders

Structured inputs handed to the generation gateway:
- PatientSummaryPromptBuilder: weekly / full-history / pre-consult summaries
- ProgramSummaryPromptBuilder: program overview and single-meeting summaries
- DiagnosisSuggestionBuilder: nutrition diagnosis suggestions (+ response parser)
- EducationMaterialBuilder: patient-education material
"""
from .facts import PatientFacts, AnthropometryPoint, LabPoint
from .patient import (
    PatientSummaryPromptBuilder,
    PatientSummaryPayload,
    ConsultationDigest,
    ActivePlanFacts,
    MODE_HEADERS,
    digest_consultation,
)
from .program import (
    ProgramSummaryPromptBuilder,
    ProgramSummaryPayload,
    ParticipantFacts,
    MeetingFacts,
)
from .diagnosis import (
    DiagnosisSuggestionBuilder,
    DiagnosisPayload,
    select_main_lab_results,
    dietary_pattern_summary,
    strip_code_fence,
    parse_diagnosis_response,
)
from .education import (
    EducationMaterialBuilder,
    EducationPayload,
    EducationPatientInfo,
    EducationProgramInfo,
)

__all__ = [
    "PatientFacts",
    "AnthropometryPoint",
    "LabPoint",
    "PatientSummaryPromptBuilder",
    "PatientSummaryPayload",
    "ConsultationDigest",
    "ActivePlanFacts",
    "MODE_HEADERS",
    "digest_consultation",
    "ProgramSummaryPromptBuilder",
    "ProgramSummaryPayload",
    "ParticipantFacts",
    "MeetingFacts",
    "DiagnosisSuggestionBuilder",
    "DiagnosisPayload",
    "select_main_lab_results",
    "dietary_pattern_summary",
    "strip_code_fence",
    "parse_diagnosis_response",
    "EducationMaterialBuilder",
    "EducationPayload",
    "EducationPatientInfo",
    "EducationProgramInfo",
]
