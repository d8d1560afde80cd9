"""
Patient Summary Payload Builder

Builds the structured input for patient-level AI summaries. The summary
mode only selects the instructional header placed in front of the data;
the data itself is identical for every mode and is never filtered by it.
Period filtering happens upstream, in the accessor calls.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from nutricare.core.domain.accessors import DateRange
from nutricare.core.domain.artifacts import SummaryType
from nutricare.core.domain.entities import (
    AnthropometryRecord,
    Consultation,
    ConsultationType,
    LabResult,
    NutritionPlan,
    Patient,
)
from nutricare.core.summaries.facts import AnthropometryPoint, LabPoint, PatientFacts

MODE_HEADERS = {
    SummaryType.WEEKLY_OVERVIEW: (
        "TIPO DE RESUMO: Visão Semanal\n"
        "Gere um resumo focado na evolução dos últimos 7 dias, destacando mudanças "
        "recentes em parâmetros antropométricos, exames e consultas."
    ),
    SummaryType.FULL_HISTORY: (
        "TIPO DE RESUMO: Histórico Completo\n"
        "Gere um resumo abrangente de todo o histórico do paciente, incluindo evolução "
        "ao longo do tempo, tendências e análise nutricional completa."
    ),
    SummaryType.PRE_CONSULT: (
        "TIPO DE RESUMO: Pré-Consulta\n"
        "Gere um resumo conciso para preparação de consulta, destacando pontos principais "
        "que o profissional deve revisar antes do atendimento."
    ),
}

EMPTY_CONSULTATION_DIGEST = "Consulta registrada"


def digest_consultation(consultation: Consultation) -> str:
    """
    One-line digest: complaint, diagnosis, plan, in that order.

    Absent fields are skipped; a consultation with none of them still gets
    a fixed placeholder.
    """
    parts = []
    if consultation.main_complaint:
        parts.append(f"Queixa: {consultation.main_complaint}")
    if consultation.nutrition_diagnosis:
        parts.append(f"Diagnóstico: {consultation.nutrition_diagnosis}")
    if consultation.plan:
        parts.append(f"Plano: {consultation.plan}")
    return "; ".join(parts) if parts else EMPTY_CONSULTATION_DIGEST


@dataclass(frozen=True)
class ConsultationDigest:
    date: datetime
    type: ConsultationType
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "type": self.type.value,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class ActivePlanFacts:
    title: str
    goals: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "goals": self.goals}


@dataclass
class PatientSummaryPayload:
    """Structured input for a patient summary generation call."""
    mode: SummaryType
    header: str
    patient: PatientFacts
    consultations: List[ConsultationDigest] = field(default_factory=list)
    anthropometry: List[AnthropometryPoint] = field(default_factory=list)
    lab_results: List[LabPoint] = field(default_factory=list)
    # None is the explicit "no active plan" marker
    active_plan: Optional[ActivePlanFacts] = None
    period: DateRange = field(default_factory=DateRange)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "header": self.header,
            "patient": self.patient.to_dict(),
            "consultations": [c.to_dict() for c in self.consultations],
            "anthropometry_records": [a.to_dict() for a in self.anthropometry],
            "lab_results": [r.to_dict() for r in self.lab_results],
            "active_nutrition_plan": self.active_plan.to_dict() if self.active_plan else None,
            "period_start": self.period.start.isoformat() if self.period.start else None,
            "period_end": self.period.end.isoformat() if self.period.end else None,
        }


class PatientSummaryPromptBuilder:
    """Assembles a PatientSummaryPayload from already-fetched records."""

    def build(
        self,
        patient: Patient,
        consultations: Sequence[Consultation],
        anthropometry: Sequence[AnthropometryRecord],
        lab_results: Sequence[LabResult],
        active_plan: Optional[NutritionPlan],
        mode: SummaryType,
        today: date,
        period: Optional[DateRange] = None,
    ) -> PatientSummaryPayload:
        return PatientSummaryPayload(
            mode=mode,
            header=MODE_HEADERS[mode],
            patient=PatientFacts.from_patient(patient, today),
            consultations=[
                ConsultationDigest(
                    date=c.date_time,
                    type=c.type,
                    summary=digest_consultation(c),
                )
                for c in consultations
            ],
            anthropometry=[AnthropometryPoint.from_record(r) for r in anthropometry],
            lab_results=[LabPoint.from_result(r) for r in lab_results],
            active_plan=(
                ActivePlanFacts(title=active_plan.title, goals=active_plan.goals)
                if active_plan is not None else None
            ),
            period=period or DateRange(),
        )
