"""
Education Material Service

Generates patient-education text on a topic, tailored to one patient
(INDIVIDUAL) or one program's participants (GROUP).
"""
from dataclasses import dataclass
from typing import Optional

from nutricare.core.domain import (
    ClinicalDataAccessors,
    EducationContext,
    EducationMaterialArtifact,
    RequestContext,
    SummaryPersistence,
)
from nutricare.core.llm import GenerationGateway, GenerationMode
from nutricare.core.summaries import EducationMaterialBuilder
from nutricare.services.common import Clock, require_patient, require_program, utc_now
from nutricare.utils import ValidationError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EducationMaterialRequest:
    topic: str
    context: EducationContext
    patient_id: Optional[str] = None
    program_id: Optional[str] = None


class EducationMaterialService:
    def __init__(
        self,
        accessors: ClinicalDataAccessors,
        persistence: SummaryPersistence,
        gateway: GenerationGateway,
        builder: Optional[EducationMaterialBuilder] = None,
        clock: Clock = utc_now,
    ):
        self.accessors = accessors
        self.persistence = persistence
        self.gateway = gateway
        self.builder = builder or EducationMaterialBuilder()
        self.clock = clock

    async def generate(
        self, context: RequestContext, request: EducationMaterialRequest
    ) -> EducationMaterialArtifact:
        """
        Raises:
            ValidationError: empty topic
            NotFoundError: referenced patient or program absent
            GenerationError: provider failure; nothing is persisted
        """
        if not request.topic.strip():
            raise ValidationError("topic must not be empty", field="topic")

        org_id = context.organization_id
        logger.info(f"Generating {request.context.value} education material (org {org_id})")

        patient = None
        if request.context == EducationContext.INDIVIDUAL and request.patient_id:
            patient = await require_patient(self.accessors, request.patient_id, org_id)

        program = None
        if request.context == EducationContext.GROUP and request.program_id:
            program = await require_program(self.accessors, request.program_id, org_id)

        payload = self.builder.build(
            topic=request.topic,
            context=request.context,
            today=self.clock().date(),
            patient=patient,
            program=program,
        )

        text = await self.gateway.generate(payload, GenerationMode.EDUCATION_MATERIAL)

        artifact = await self.persistence.persist_education_material(
            organization_id=org_id,
            topic=request.topic,
            context=request.context,
            text=text,
            patient_id=request.patient_id,
            program_id=request.program_id,
        )
        logger.info(f"Stored education material {artifact.id}")
        return artifact
