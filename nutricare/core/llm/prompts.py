"""
Prompt Rendering

Turns the structured payloads built in core.summaries into the Portuguese
prompt text sent to the generation provider. Every data block renders an
explicit "none" line when empty so the model never has to guess whether
data was omitted.
"""
from typing import List

from nutricare.core.domain.artifacts import EducationContext
from nutricare.core.domain.entities import format_number
from nutricare.core.reports.formatting import (
    CONSULTATION_TYPE_SHORT_LABELS,
    format_date,
    format_datetime,
    format_optional_date,
    sex_label,
)
from nutricare.core.summaries.diagnosis import DiagnosisPayload
from nutricare.core.summaries.education import EducationPayload
from nutricare.core.summaries.facts import LabPoint
from nutricare.core.summaries.patient import PatientSummaryPayload
from nutricare.core.summaries.program import ProgramSummaryPayload

LIST_PREVIEW_LIMIT = 10
MEETING_NOTES_PREVIEW = 100

PATIENT_SUMMARY_SYSTEM = (
    "Você é um assistente especializado em Nutrição Clínica. Gere resumos profissionais, "
    "objetivos e baseados em evidências para profissionais de Nutrição."
)

PROGRAM_SUMMARY_SYSTEM = (
    "Você é um assistente especializado em análise de programas de Nutrição em grupo. "
    "Gere resumos profissionais, objetivos e baseados em dados reais."
)

DIAGNOSIS_SYSTEM = (
    "Você é um assistente especializado em Nutrição Clínica com conhecimento profundo da "
    "Taxonomia NANDA Internacional. Gere sugestões de diagnósticos nutricionais precisos e "
    "baseados em evidências."
)

EDUCATION_SYSTEM = (
    "Você é um assistente especializado em Educação Nutricional. Gere materiais educativos "
    "claros, didáticos e baseados em evidências científicas."
)


def _lab_line(result: LabPoint) -> str:
    line = f"- {format_date(result.date)} - {result.name}: {result.value.render()} {result.unit}"
    if result.reference_range:
        line += f" (Referência: {result.reference_range})"
    return line


def _signed(value: float) -> str:
    return f"{'+' if value > 0 else ''}{value:.2f}"


def render_patient_summary(payload: PatientSummaryPayload) -> str:
    patient = payload.patient
    diagnoses_text = (
        f"Diagnósticos clínicos relevantes: {', '.join(patient.clinical_diagnoses)}"
        if patient.clinical_diagnoses
        else "Nenhum diagnóstico clínico registrado"
    )

    lines: List[str] = [
        "Você é um assistente especializado em Nutrição Clínica. Seu objetivo é gerar um resumo "
        "profissional e objetivo sobre o paciente, focado em análise nutricional e evolução.",
        "",
        "IMPORTANTE:",
        "- Este texto é destinado a um profissional de Nutrição",
        "- NÃO forneça diagnóstico médico",
        "- Foque em análise nutricional, evolução dos parâmetros e recomendações nutricionais",
        "- Seja objetivo, claro e baseado nos dados fornecidos",
        "- Use linguagem técnica apropriada para profissionais de saúde",
        "",
        "DADOS DO PACIENTE:",
        f"- Nome: {patient.name}",
        f"- Sexo: {sex_label(patient.sex)}",
        f"- Idade aproximada: {patient.age} anos",
        f"- {diagnoses_text}",
        "",
        payload.header,
        "",
    ]

    if payload.consultations:
        lines.append("CONSULTAS:")
        for c in payload.consultations:
            label = CONSULTATION_TYPE_SHORT_LABELS.get(c.type, str(c.type))
            lines.append(f"- {format_datetime(c.date)} - {label}: {c.summary}")
        lines.append("")
    else:
        lines.extend(["CONSULTAS: Nenhuma consulta registrada", ""])

    if payload.anthropometry:
        lines.append("REGISTROS ANTROPOMÉTRICOS:")
        for record in payload.anthropometry:
            parts = []
            if record.weight_kg is not None:
                parts.append(f"Peso: {format_number(record.weight_kg)} kg")
            if record.bmi is not None:
                parts.append(f"IMC: {record.bmi:.1f}")
            if record.waist_circumference is not None:
                parts.append(f"Cintura: {format_number(record.waist_circumference)} cm")
            lines.append(f"- {format_date(record.date)}: {', '.join(parts)}")
        lines.append("")
    else:
        lines.extend(["REGISTROS ANTROPOMÉTRICOS: Nenhum registro encontrado", ""])

    if payload.lab_results:
        lines.append("EXAMES LABORATORIAIS:")
        lines.extend(_lab_line(r) for r in payload.lab_results)
        lines.append("")
    else:
        lines.extend(["EXAMES LABORATORIAIS: Nenhum exame registrado", ""])

    if payload.active_plan is not None:
        lines.extend([
            "PLANO NUTRICIONAL ATIVO:",
            f"- Título: {payload.active_plan.title}",
            f"- Objetivos: {payload.active_plan.goals}",
            "",
        ])
    else:
        lines.extend(["PLANO NUTRICIONAL ATIVO: Nenhum plano ativo", ""])

    lines.append("Gere o resumo profissional seguindo as diretrizes acima.")
    return "\n".join(lines)


def render_program_summary(payload: ProgramSummaryPayload) -> str:
    program = payload.program
    lines: List[str] = [
        "Você é um assistente especializado em análise de programas de Nutrição em grupo. "
        "Seu objetivo é gerar resumos profissionais e objetivos sobre programas nutricionais.",
        "",
        "DADOS DO PROGRAMA:",
        f"- Nome: {program.name}",
        f"- Descrição: {program.description or 'Não informada'}",
        f"- Status: {program.status.value}",
        f"- Data de início: {format_optional_date(program.start_date)}",
        f"- Data de término: {format_optional_date(program.end_date)}",
        "",
        "OBJETIVOS:",
        payload.objectives,
        "",
        f"PARTICIPANTES ({len(payload.participants)}):",
    ]

    for participant in payload.participants[:LIST_PREVIEW_LIMIT]:
        lines.append(f"- {participant.name} (entrada: {format_date(participant.join_date)})")
    if len(payload.participants) > LIST_PREVIEW_LIMIT:
        lines.append(
            f"- ... e mais {len(payload.participants) - LIST_PREVIEW_LIMIT} participantes"
        )

    lines.extend(["", f"ENCONTROS REALIZADOS ({len(payload.meetings)}):"])
    for meeting in payload.meetings[:LIST_PREVIEW_LIMIT]:
        lines.append(
            f"- {format_date(meeting.date)}: {meeting.topic} "
            f"({meeting.participants_count} participantes)"
        )
        if meeting.notes:
            preview = meeting.notes[:MEETING_NOTES_PREVIEW]
            if len(meeting.notes) > MEETING_NOTES_PREVIEW:
                preview += "..."
            lines.append(f"  Observações: {preview}")
    if len(payload.meetings) > LIST_PREVIEW_LIMIT:
        lines.append(f"- ... e mais {len(payload.meetings) - LIST_PREVIEW_LIMIT} encontros")

    evolution = payload.average_evolution
    if evolution is not None:
        lines.extend(["", "EVOLUÇÃO MÉDIA:"])
        if evolution.average_weight_change is not None:
            lines.append(f"- Variação média de peso: {_signed(evolution.average_weight_change)} kg")
        if evolution.average_bmi_change is not None:
            lines.append(f"- Variação média de IMC: {_signed(evolution.average_bmi_change)}")
        lines.append(f"- Taxa de comparecimento: {evolution.attendance_rate * 100:.1f}%")

    lines.extend([
        "",
        "Gere um resumo profissional e objetivo do programa, destacando:",
        "- Objetivos e alcance",
        "- Participação e engajamento",
        "- Principais temas abordados",
        "- Evolução dos participantes (se disponível)",
        "- Destaques e observações relevantes",
    ])
    return "\n".join(lines)


def render_diagnosis(payload: DiagnosisPayload) -> str:
    patient = payload.patient
    diagnoses_text = (
        f"Diagnósticos clínicos: {', '.join(patient.clinical_diagnoses)}"
        if patient.clinical_diagnoses
        else "Nenhum diagnóstico clínico registrado"
    )

    lines: List[str] = [
        "Você é um assistente especializado em Nutrição Clínica com conhecimento profundo da "
        "Classificação Internacional das Doenças (CID) e da Taxonomia NANDA Internacional "
        "para diagnósticos nutricionais.",
        "",
        "IMPORTANTE:",
        "- Você deve sugerir diagnósticos nutricionais baseados na Taxonomia NANDA Internacional",
        "- Use o formato PES (Problema, Etiologia, Sinais/Sintomas) quando aplicável",
        "- Seja objetivo, preciso e baseado em evidências",
        "- Forneça múltiplas sugestões quando apropriado",
        "- Cada diagnóstico deve incluir: título claro, formato PES (se aplicável) e "
        "justificativa (rationale)",
        "",
        "DADOS DO PACIENTE:",
        f"- Nome: {patient.name}",
        f"- Sexo: {sex_label(patient.sex)}",
        f"- Idade: {patient.age} anos",
        f"- {diagnoses_text}",
        "",
    ]

    recent = payload.recent_anthropometry
    if recent is not None:
        lines.append(f"ANTROPOMETRIA ({format_date(recent.date)}):")
        if recent.weight_kg is not None:
            lines.append(f"- Peso: {format_number(recent.weight_kg)} kg")
        if recent.bmi is not None:
            lines.append(f"- IMC: {recent.bmi:.1f}")
        if recent.waist_circumference is not None:
            lines.append(
                f"- Circunferência da Cintura: {format_number(recent.waist_circumference)} cm"
            )
        if payload.weight_variation is not None and payload.previous_anthropometry is not None:
            direction = "aumento" if payload.weight_variation.is_increase else "redução"
            lines.append(
                f"- Variação de peso desde {format_date(payload.previous_anthropometry.date)}: "
                f"{direction} de {payload.weight_variation.magnitude:.1f} kg"
            )
        if payload.bmi_variation is not None:
            direction = "aumento" if payload.bmi_variation.is_increase else "redução"
            lines.append(
                f"- Variação de IMC: {direction} de {payload.bmi_variation.magnitude:.1f}"
            )
        lines.append("")
    else:
        lines.extend(["ANTROPOMETRIA: Não há registros recentes", ""])

    if payload.main_lab_results:
        lines.append("EXAMES LABORATORIAIS PRINCIPAIS:")
        lines.extend(_lab_line(r) for r in payload.main_lab_results)
        lines.append("")
    else:
        lines.extend(["EXAMES LABORATORIAIS: Nenhum exame registrado", ""])

    if payload.dietary_pattern_summary:
        lines.extend(["PADRÃO ALIMENTAR:", payload.dietary_pattern_summary, ""])
    else:
        lines.extend(["PADRÃO ALIMENTAR: Informações não disponíveis", ""])

    lines.extend([
        "Gere sugestões de diagnósticos nutricionais seguindo o formato JSON abaixo. "
        "Retorne APENAS um array JSON válido, sem markdown ou texto adicional:",
        "",
        "[",
        "  {",
        '    "title": "Título do diagnóstico nutricional (conforme NANDA)",',
        '    "pesFormat": "Problema relacionado a [etiologia] evidenciado por [sinais/sintomas]",',
        '    "rationale": "Justificativa baseada nos dados fornecidos"',
        "  }",
        "]",
    ])
    return "\n".join(lines)


def render_education(payload: EducationPayload) -> str:
    if payload.context == EducationContext.INDIVIDUAL:
        context_label = "Atendimento Individual"
    else:
        context_label = "Programa em Grupo"
    lines: List[str] = [
        "Você é um assistente especializado em Educação Nutricional. Seu objetivo é gerar "
        "material educativo claro, didático e baseado em evidências científicas.",
        "",
        f"CONTEXTO: {context_label}",
        f"TÓPICO: {payload.topic}",
        "",
    ]

    if payload.context == EducationContext.INDIVIDUAL and payload.patient_info is not None:
        info = payload.patient_info
        conditions = ", ".join(info.clinical_conditions) if info.clinical_conditions else "Nenhuma"
        lines.extend([
            "PACIENTE:",
            f"- Nome: {info.name}",
            f"- Idade: {info.age} anos",
            f"- Sexo: {sex_label(info.sex)}",
            f"- Condições clínicas: {conditions}",
            "",
        ])

    if payload.context == EducationContext.GROUP and payload.program_info is not None:
        info = payload.program_info
        lines.extend([
            "PROGRAMA:",
            f"- Nome: {info.name}",
            f"- Descrição: {info.description or 'Não informada'}",
            f"- Público-alvo: {info.target_audience}",
            "",
        ])

    lines.extend([
        "DIRETRIZES:",
        "- Use linguagem clara e acessível",
        "- Inclua informações práticas e aplicáveis",
        "- Baseado em evidências científicas atuais",
        "- Seja motivacional e encorajador",
        "- Estruture o texto de forma didática",
        "- Adapte o conteúdo ao contexto (individual ou grupo)",
        "",
        f'Gere o material educativo sobre "{payload.topic}" seguindo as diretrizes acima.',
    ])
    return "\n".join(lines)
