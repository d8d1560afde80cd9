"""
Nutrition Report Service

Fetches everything a patient report needs and hands it to the assembler.
Reads after the patient lookup run concurrently; the assembler applies all
ordering and truncation, so completion order does not matter.
"""
import asyncio
from typing import Optional

from nutricare.core.domain import ClinicalDataAccessors, RequestContext
from nutricare.core.reports import (
    NutritionReport,
    NutritionReportAssembler,
    NutritionReportPdfRenderer,
)
from nutricare.services.common import Clock, require_patient, utc_now
from nutricare.utils import get_logger

logger = get_logger(__name__)


class NutritionReportService:
    def __init__(
        self,
        accessors: ClinicalDataAccessors,
        assembler: Optional[NutritionReportAssembler] = None,
        pdf_renderer: Optional[NutritionReportPdfRenderer] = None,
        clock: Clock = utc_now,
    ):
        self.accessors = accessors
        self.assembler = assembler or NutritionReportAssembler()
        self.pdf_renderer = pdf_renderer or NutritionReportPdfRenderer()
        self.clock = clock

    async def generate(self, context: RequestContext, patient_id: str) -> NutritionReport:
        """
        Build the nutrition report for one patient.

        Raises:
            NotFoundError: patient absent for the organization
            DataIntegrityError: anthropometry list with a missing first record
        """
        org_id = context.organization_id
        logger.info(f"Generating nutrition report for patient {patient_id} (org {org_id})")

        patient = await require_patient(self.accessors, patient_id, org_id)

        anthropometry, lab_results, consultations, active_plan, guidance = await asyncio.gather(
            self.accessors.list_anthropometry(patient_id, org_id),
            self.accessors.list_lab_results(patient_id, org_id),
            self.accessors.list_consultations(org_id, patient_id=patient_id),
            self.accessors.find_active_nutrition_plan(patient_id, org_id),
            self.accessors.find_latest_guidance(patient_id, org_id),
        )

        report = self.assembler.assemble(
            patient=patient,
            anthropometry=anthropometry,
            lab_results=lab_results,
            consultations=consultations,
            active_plan=active_plan,
            latest_guidance=guidance,
            generated_at=self.clock(),
        )
        logger.info(
            f"Nutrition report for patient {patient_id} ready: "
            f"{', '.join(report.section_titles)}"
        )
        return report

    async def generate_pdf(self, context: RequestContext, patient_id: str) -> str:
        """Build the report and render it to a PDF; returns the file path."""
        report = await self.generate(context, patient_id)
        return self.pdf_renderer.render(report)
