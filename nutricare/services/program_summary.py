"""
Program Summary Service

Summarises a group program as a whole or one of its meetings.
"""
from dataclasses import dataclass
from typing import List, Optional

from nutricare.core.domain import (
    ClinicalDataAccessors,
    ProgramSummaryArtifact,
    ProgramSummaryType,
    RequestContext,
    SummaryPersistence,
)
from nutricare.core.llm import GenerationGateway, GenerationMode
from nutricare.core.summaries import ProgramSummaryPromptBuilder
from nutricare.services.common import require_program
from nutricare.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgramSummaryRequest:
    program_id: str
    summary_type: ProgramSummaryType = ProgramSummaryType.PROGRAM_OVERVIEW
    meeting_id: Optional[str] = None


class ProgramSummaryService:
    def __init__(
        self,
        accessors: ClinicalDataAccessors,
        persistence: SummaryPersistence,
        gateway: GenerationGateway,
        builder: Optional[ProgramSummaryPromptBuilder] = None,
    ):
        self.accessors = accessors
        self.persistence = persistence
        self.gateway = gateway
        self.builder = builder or ProgramSummaryPromptBuilder()

    async def generate(
        self, context: RequestContext, request: ProgramSummaryRequest
    ) -> ProgramSummaryArtifact:
        """
        Raises:
            NotFoundError: program absent for the organization
            GenerationError: provider failure; nothing is persisted
        """
        org_id = context.organization_id
        logger.info(
            f"Generating {request.summary_type.value} for program {request.program_id} "
            f"(org {org_id}, meeting {request.meeting_id})"
        )

        program = await require_program(self.accessors, request.program_id, org_id)
        payload = self.builder.build(program, request.summary_type, request.meeting_id)
        logger.info(
            f"Program payload: {len(payload.participants)} participant(s), "
            f"{len(payload.meetings)} meeting(s)"
        )

        text = await self.gateway.generate(payload, GenerationMode.PROGRAM_SUMMARY)

        artifact = await self.persistence.persist_program_summary(
            organization_id=org_id,
            program_id=program.id,
            summary_type=request.summary_type,
            text=text,
            meeting_id=request.meeting_id,
        )
        logger.info(f"Stored program summary {artifact.id} for program {program.id}")
        return artifact

    async def history(
        self,
        context: RequestContext,
        program_id: str,
        summary_type: Optional[ProgramSummaryType] = None,
        meeting_id: Optional[str] = None,
    ) -> List[ProgramSummaryArtifact]:
        return await self.persistence.list_program_summaries(
            context.organization_id, program_id, summary_type=summary_type, meeting_id=meeting_id
        )
