"""
Patient Summary Service

Aggregates a patient's records (optionally restricted to a period), asks the
generation gateway for a summary and stores the result. The artifact is
written only after generation succeeded.
"""
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from nutricare.core.domain import (
    ClinicalDataAccessors,
    DateRange,
    RequestContext,
    SummaryArtifact,
    SummaryPersistence,
    SummaryType,
)
from nutricare.core.llm import GenerationGateway, GenerationMode
from nutricare.core.summaries import PatientSummaryPromptBuilder
from nutricare.services.common import Clock, require_patient, utc_now
from nutricare.utils import ValidationError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PatientSummaryRequest:
    patient_id: str
    summary_type: SummaryType
    period: DateRange = field(default_factory=DateRange)


class PatientSummaryService:
    def __init__(
        self,
        accessors: ClinicalDataAccessors,
        persistence: SummaryPersistence,
        gateway: GenerationGateway,
        builder: Optional[PatientSummaryPromptBuilder] = None,
        clock: Clock = utc_now,
    ):
        self.accessors = accessors
        self.persistence = persistence
        self.gateway = gateway
        self.builder = builder or PatientSummaryPromptBuilder()
        self.clock = clock

    async def generate(
        self, context: RequestContext, request: PatientSummaryRequest
    ) -> SummaryArtifact:
        """
        Raises:
            NotFoundError: patient absent for the organization
            ValidationError: no acting professional in the context
            GenerationError: provider failure; nothing is persisted
        """
        if not context.professional_id:
            raise ValidationError("professional_id is required", field="professional_id")

        org_id = context.organization_id
        patient_id = request.patient_id
        period = request.period if not request.period.is_open else None
        logger.info(
            f"Generating {request.summary_type.value} summary for patient {patient_id} "
            f"(org {org_id})"
        )

        patient = await require_patient(self.accessors, patient_id, org_id)

        consultations, anthropometry, lab_results, active_plan = await asyncio.gather(
            self.accessors.list_consultations(org_id, patient_id=patient_id, period=period),
            self.accessors.list_anthropometry(patient_id, org_id, period=period),
            self.accessors.list_lab_results(patient_id, org_id, period=period),
            self.accessors.find_active_nutrition_plan(patient_id, org_id),
        )

        payload = self.builder.build(
            patient=patient,
            consultations=consultations,
            anthropometry=anthropometry,
            lab_results=lab_results,
            active_plan=active_plan,
            mode=request.summary_type,
            today=self.clock().date(),
            period=request.period,
        )
        logger.info(
            f"Summary payload: {len(payload.consultations)} consultation(s), "
            f"{len(payload.anthropometry)} anthropometry record(s), "
            f"{len(payload.lab_results)} lab result(s)"
        )

        text = await self.gateway.generate(payload, GenerationMode.PATIENT_SUMMARY)

        artifact = await self.persistence.persist_summary(
            organization_id=org_id,
            patient_id=patient_id,
            professional_id=context.professional_id,
            summary_type=request.summary_type,
            text=text,
            period=period,
        )
        logger.info(f"Stored summary {artifact.id} for patient {patient_id}")
        return artifact

    async def history(
        self,
        context: RequestContext,
        patient_id: str,
        summary_type: Optional[SummaryType] = None,
        created: Optional[DateRange] = None,
    ) -> List[SummaryArtifact]:
        """Stored summaries for a patient, newest first."""
        return await self.persistence.list_summaries(
            context.organization_id, patient_id, summary_type=summary_type, created=created
        )
