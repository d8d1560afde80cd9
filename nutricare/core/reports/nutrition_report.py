"""
Patient Nutrition Report Assembler

Builds the human-readable narrative report for one patient as an ordered
list of titled text sections:

- Dados do Paciente (always present)
- Antropometria (most recent record only)
- Exames Laboratoriais (10 most recent)
- Histórico de Consultas (5 most recent)
- Plano Nutricional Ativo (the active plan)
- Condutas Gerais (most recent guidance)

A section whose source has no records is omitted, never emitted empty.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from nutricare.core.domain.entities import (
    AnthropometryRecord,
    Consultation,
    GeneralGuidance,
    LabResult,
    NutritionPlan,
    Patient,
    format_number,
)
from nutricare.core.reports.formatting import (
    consultation_type_label,
    format_date,
    format_datetime,
    meal_type_label,
    sex_label,
)
from nutricare.utils import DataIntegrityError, get_logger

logger = get_logger(__name__)

PATIENT_DATA_TITLE = "Dados do Paciente"
ANTHROPOMETRY_TITLE = "Antropometria"
LAB_RESULTS_TITLE = "Exames Laboratoriais"
CONSULTATIONS_TITLE = "Histórico de Consultas"
ACTIVE_PLAN_TITLE = "Plano Nutricional Ativo"
GUIDANCE_TITLE = "Condutas Gerais"

LAB_RESULTS_LIMIT = 10
CONSULTATIONS_LIMIT = 5


@dataclass
class ReportSection:
    title: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content}


@dataclass
class NutritionReport:
    """Data container for an assembled patient report."""
    patient_id: str
    patient_name: str
    report_date: datetime
    sections: List[ReportSection] = field(default_factory=list)

    @property
    def section_titles(self) -> List[str]:
        return [section.title for section in self.sections]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "report_date": self.report_date.isoformat(),
            "sections": [section.to_dict() for section in self.sections],
        }


class NutritionReportAssembler:
    """
    Assembles a NutritionReport from already-fetched records.

    Every list argument must be ordered newest-first, as the accessors
    return them. Stateless.
    """

    def assemble(
        self,
        patient: Patient,
        anthropometry: Sequence[Optional[AnthropometryRecord]],
        lab_results: Sequence[LabResult],
        consultations: Sequence[Consultation],
        active_plan: Optional[NutritionPlan],
        latest_guidance: Optional[GeneralGuidance],
        generated_at: datetime,
    ) -> NutritionReport:
        """
        Build the ordered section list.

        Raises:
            DataIntegrityError: anthropometry is non-empty but its first
                element is missing.
        """
        sections = [self._patient_section(patient)]

        if len(anthropometry) > 0:
            sections.append(self._anthropometry_section(anthropometry))
        if len(lab_results) > 0:
            sections.append(self._lab_results_section(lab_results))
        if len(consultations) > 0:
            sections.append(self._consultations_section(consultations))
        if active_plan is not None:
            sections.append(self._active_plan_section(active_plan))
        if latest_guidance is not None:
            sections.append(self._guidance_section(latest_guidance))

        logger.debug(f"Report for patient {patient.id}: {len(sections)} section(s)")
        return NutritionReport(
            patient_id=patient.id,
            patient_name=patient.full_name,
            report_date=generated_at,
            sections=sections,
        )

    # ── Sections ──────────────────────────────────────────────────────────

    def _patient_section(self, patient: Patient) -> ReportSection:
        content = (
            f"Nome: {patient.full_name}\n"
            f"Data de Nascimento: {format_date(patient.birth_date)}\n"
            f"Sexo: {sex_label(patient.sex)}\n"
        )
        if patient.email:
            content += f"Email: {patient.email}\n"
        if patient.phone:
            content += f"Telefone: {patient.phone}\n"
        return ReportSection(PATIENT_DATA_TITLE, content)

    def _anthropometry_section(
        self, records: Sequence[Optional[AnthropometryRecord]]
    ) -> ReportSection:
        latest = records[0]
        if latest is None:
            raise DataIntegrityError(
                "Most recent anthropometry record is missing from a non-empty series",
                source="anthropometry",
                details={"records": len(records)},
            )

        content = f"Última avaliação: {format_date(latest.date)}\n\n"
        if latest.weight_kg is not None:
            content += f"Peso: {format_number(latest.weight_kg)} kg\n"
        if latest.height_m is not None:
            content += f"Altura: {format_number(latest.height_m)} m\n"
        if latest.bmi is not None:
            content += f"IMC: {latest.bmi:.2f}\n"
        if latest.waist_circumference is not None:
            content += f"Circunferência da Cintura: {format_number(latest.waist_circumference)} cm\n"
        if latest.hip_circumference is not None:
            content += f"Circunferência do Quadril: {format_number(latest.hip_circumference)} cm\n"
        if latest.arm_circumference is not None:
            content += f"Circunferência do Braço: {format_number(latest.arm_circumference)} cm\n"
        if latest.notes:
            content += f"\nObservações: {latest.notes}"
        return ReportSection(ANTHROPOMETRY_TITLE, content)

    def _lab_results_section(self, results: Sequence[LabResult]) -> ReportSection:
        lines = []
        for result in results[:LAB_RESULTS_LIMIT]:
            line = (
                f"{format_date(result.date)} - {result.name}: "
                f"{result.value.render()} {result.unit}"
            )
            if result.reference_range:
                line += f" (Referência: {result.reference_range})"
            lines.append(line)
        return ReportSection(LAB_RESULTS_TITLE, "\n".join(lines).strip())

    def _consultations_section(self, consultations: Sequence[Consultation]) -> ReportSection:
        content = ""
        for consultation in consultations[:CONSULTATIONS_LIMIT]:
            content += (
                f"{format_datetime(consultation.date_time)} - "
                f"{consultation_type_label(consultation.type)}\n"
            )
            if consultation.main_complaint:
                content += f"Queixa Principal: {consultation.main_complaint}\n"
            if consultation.nutrition_diagnosis:
                content += f"Diagnóstico Nutricional: {consultation.nutrition_diagnosis}\n"
            content += "\n"
        return ReportSection(CONSULTATIONS_TITLE, content.strip())

    def _active_plan_section(self, plan: NutritionPlan) -> ReportSection:
        content = f"Título: {plan.title}\n"
        content += f"Objetivos: {plan.goals}\n"

        if plan.meals:
            content += "\nRefeições:\n"
            for meal in plan.meals:
                content += f"\n{meal_type_label(meal.meal_type)}:\n"
                content += f"{meal.description}\n"
                if meal.observation:
                    content += f"Observação: {meal.observation}\n"

        if plan.notes:
            content += f"\nObservações: {plan.notes}"
        return ReportSection(ACTIVE_PLAN_TITLE, content)

    def _guidance_section(self, guidance: GeneralGuidance) -> ReportSection:
        content = f"Data: {format_date(guidance.date)}\n\n"
        paragraphs = (
            ("Hidratação", guidance.hydration_guidance),
            ("Atividade Física", guidance.physical_activity_guidance),
            ("Sono", guidance.sleep_guidance),
            ("Gerenciamento de Sintomas", guidance.symptom_management_guidance),
        )
        for label, text in paragraphs:
            if text:
                content += f"{label}:\n{text}\n\n"
        if guidance.notes:
            content += f"Observações:\n{guidance.notes}"
        return ReportSection(GUIDANCE_TITLE, content.strip())
