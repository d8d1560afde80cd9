"""
Nutrition Diagnosis Suggestion Service

Asks the generation gateway for NANDA-style nutrition diagnoses based on
recent anthropometry, labs and dietary history, parses the JSON answer and
stores the suggestions.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from nutricare.config import settings
from nutricare.core.domain import (
    ClinicalDataAccessors,
    DiagnosisSuggestionArtifact,
    RequestContext,
    SummaryPersistence,
)
from nutricare.core.llm import GenerationGateway, GenerationMode
from nutricare.core.summaries import DiagnosisSuggestionBuilder, parse_diagnosis_response
from nutricare.services.common import Clock, require_patient, utc_now
from nutricare.utils import ValidationError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiagnosisSuggestionRequest:
    patient_id: str
    consultation_id: Optional[str] = None


class DiagnosisSuggestionService:
    def __init__(
        self,
        accessors: ClinicalDataAccessors,
        persistence: SummaryPersistence,
        gateway: GenerationGateway,
        builder: Optional[DiagnosisSuggestionBuilder] = None,
        clock: Clock = utc_now,
    ):
        self.accessors = accessors
        self.persistence = persistence
        self.gateway = gateway
        self.builder = builder or DiagnosisSuggestionBuilder(
            lab_window_months=settings.lab_window_months,
            lab_limit=settings.diagnosis_lab_limit,
        )
        self.clock = clock

    async def generate(
        self, context: RequestContext, request: DiagnosisSuggestionRequest
    ) -> DiagnosisSuggestionArtifact:
        """
        Raises:
            NotFoundError: patient absent for the organization
            ValidationError: no acting professional in the context
            GenerationError: provider failure or malformed JSON answer;
                nothing is persisted
        """
        if not context.professional_id:
            raise ValidationError("professional_id is required", field="professional_id")

        org_id = context.organization_id
        patient_id = request.patient_id
        logger.info(f"Generating diagnosis suggestions for patient {patient_id} (org {org_id})")

        patient = await require_patient(self.accessors, patient_id, org_id)

        anthropometry, lab_results, consultations = await asyncio.gather(
            self.accessors.list_anthropometry(patient_id, org_id),
            self.accessors.list_lab_results(patient_id, org_id),
            self.accessors.list_consultations(org_id, patient_id=patient_id),
        )

        payload = self.builder.build(
            patient=patient,
            anthropometry=anthropometry,
            lab_results=lab_results,
            consultations=consultations,
            today=self.clock().date(),
        )

        text = await self.gateway.generate(payload, GenerationMode.NUTRITION_DIAGNOSIS)
        diagnoses = parse_diagnosis_response(text)
        logger.info(f"Received {len(diagnoses)} diagnosis suggestion(s) for patient {patient_id}")

        return await self.persistence.persist_diagnosis_suggestion(
            organization_id=org_id,
            patient_id=patient_id,
            professional_id=context.professional_id,
            diagnoses=diagnoses,
            consultation_id=request.consultation_id,
        )
