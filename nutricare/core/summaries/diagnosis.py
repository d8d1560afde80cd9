"""
Nutrition Diagnosis Suggestion Builder

Aggregates what a diagnosis suggestion needs:
- patient facts with extracted clinical diagnoses
- most recent and previous anthropometry, with weight/BMI variation
- up to 15 lab results, preferring the last 6 months and falling back to
  the 15 most recent overall when that window is empty
- a dietary-pattern text from the 5 most recent consultations

The gateway answers with a JSON array of {title, pesFormat, rationale};
parse_diagnosis_response turns that text into DiagnosisSuggestion objects.
"""
import json
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from nutricare.core.domain.accessors import as_utc
from nutricare.core.domain.artifacts import DiagnosisSuggestion
from nutricare.core.domain.entities import (
    AnthropometryRecord,
    Consultation,
    LabResult,
    Patient,
)
from nutricare.core.metrics import Variation, months_before, variation
from nutricare.core.summaries.facts import AnthropometryPoint, LabPoint, PatientFacts
from nutricare.utils import GenerationError, get_logger

logger = get_logger(__name__)

DIAGNOSIS_MODE = "NUTRITION_DIAGNOSIS"
DEFAULT_LAB_WINDOW_MONTHS = 6
DEFAULT_LAB_LIMIT = 15
DIETARY_CONSULTATIONS_LIMIT = 5

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


@dataclass
class DiagnosisPayload:
    patient: PatientFacts
    recent_anthropometry: Optional[AnthropometryPoint] = None
    previous_anthropometry: Optional[AnthropometryPoint] = None
    weight_variation: Optional[Variation] = None
    bmi_variation: Optional[Variation] = None
    main_lab_results: List[LabPoint] = field(default_factory=list)
    dietary_pattern_summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patient_data": self.patient.to_dict(),
            "recent_anthropometry": (
                self.recent_anthropometry.to_dict() if self.recent_anthropometry else None
            ),
            "previous_anthropometry": (
                self.previous_anthropometry.to_dict() if self.previous_anthropometry else None
            ),
            "weight_variation": self.weight_variation.to_dict() if self.weight_variation else None,
            "bmi_variation": self.bmi_variation.to_dict() if self.bmi_variation else None,
            "main_lab_results": [r.to_dict() for r in self.main_lab_results],
            "dietary_pattern_summary": self.dietary_pattern_summary,
        }


def select_main_lab_results(
    results: Sequence[LabResult],
    today: date,
    window_months: int = DEFAULT_LAB_WINDOW_MONTHS,
    limit: int = DEFAULT_LAB_LIMIT,
) -> List[LabResult]:
    """Newest-first results inside the window, else the newest overall."""
    cutoff = months_before(today, window_months)
    in_window = [r for r in results if as_utc(r.date).date() >= cutoff]
    if in_window:
        return list(in_window[:limit])
    if results:
        logger.warning(
            f"No lab results since {cutoff.isoformat()}; "
            f"using the {min(limit, len(results))} most recent"
        )
    return list(results[:limit])


def dietary_pattern_summary(consultations: Sequence[Consultation]) -> Optional[str]:
    """
    Nutrition history and labelled complaint of the most recent consultations,
    joined by blank lines. None when nothing was recorded.
    """
    chunks = []
    for consultation in consultations[:DIETARY_CONSULTATIONS_LIMIT]:
        if consultation.nutrition_history:
            chunks.append(consultation.nutrition_history)
        if consultation.main_complaint:
            chunks.append(f"Queixa: {consultation.main_complaint}")
    return "\n\n".join(chunks) if chunks else None


class DiagnosisSuggestionBuilder:
    """Assembles a DiagnosisPayload from already-fetched records."""

    def __init__(
        self,
        lab_window_months: int = DEFAULT_LAB_WINDOW_MONTHS,
        lab_limit: int = DEFAULT_LAB_LIMIT,
    ):
        self.lab_window_months = lab_window_months
        self.lab_limit = lab_limit

    def build(
        self,
        patient: Patient,
        anthropometry: Sequence[AnthropometryRecord],
        lab_results: Sequence[LabResult],
        consultations: Sequence[Consultation],
        today: date,
    ) -> DiagnosisPayload:
        recent = anthropometry[0] if len(anthropometry) > 0 else None
        previous = anthropometry[1] if len(anthropometry) > 1 else None

        return DiagnosisPayload(
            patient=PatientFacts.from_patient(patient, today),
            recent_anthropometry=AnthropometryPoint.from_record(recent) if recent else None,
            previous_anthropometry=AnthropometryPoint.from_record(previous) if previous else None,
            weight_variation=(
                variation(recent.weight_kg, previous.weight_kg) if recent and previous else None
            ),
            bmi_variation=variation(recent.bmi, previous.bmi) if recent and previous else None,
            main_lab_results=[
                LabPoint.from_result(r)
                for r in select_main_lab_results(
                    lab_results, today, self.lab_window_months, self.lab_limit
                )
            ],
            dietary_pattern_summary=dietary_pattern_summary(consultations),
        )


class _SuggestionSchema(BaseModel):
    title: str
    pesFormat: Optional[str] = None
    rationale: str


_SUGGESTIONS = TypeAdapter(List[_SuggestionSchema])


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` / ```json fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned))
    return cleaned.strip()


def parse_diagnosis_response(text: str) -> List[DiagnosisSuggestion]:
    """
    Parse the generated JSON array of suggestions.

    Raises:
        GenerationError: the text is not a JSON array of well-formed
            suggestion objects.
    """
    cleaned = strip_code_fence(text)
    try:
        items = _SUGGESTIONS.validate_python(json.loads(cleaned))
    except json.JSONDecodeError as e:
        problem = f"invalid JSON ({e.msg} at line {e.lineno}, column {e.colno})"
        raise _malformed(problem) from e
    except PydanticValidationError as e:
        raise _malformed(f"unexpected shape ({_error_summary(e)})") from e

    return [
        DiagnosisSuggestion(title=item.title, pes_format=item.pesFormat, rationale=item.rationale)
        for item in items
    ]


def _error_summary(error: PydanticValidationError) -> str:
    """Locations and error types only; the generated text stays out of logs."""
    details = error.errors(include_url=False, include_context=False, include_input=False)
    return "; ".join(
        f"{'.'.join(str(part) for part in d['loc']) or '<root>'}: {d['type']}" for d in details
    )


def _malformed(problem: str) -> GenerationError:
    logger.error(f"Malformed diagnosis suggestion response: {problem}")
    return GenerationError(
        f"Malformed nutrition diagnosis response: {problem}",
        mode=DIAGNOSIS_MODE,
        reason=GenerationError.MALFORMED_RESPONSE,
    )
