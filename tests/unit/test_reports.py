"""
Unit Tests for Report Generation

Section ordering, omission of empty sections, truncation rules and PDF export.
"""
import os
from datetime import date, timedelta

import pytest

from nutricare.core.domain import (
    AnthropometryRecord,
    Consultation,
    ConsultationType,
    LabResult,
    LabTestType,
    Patient,
    Sex,
    parse_lab_value,
)
from nutricare.core.reports import (
    NutritionReport,
    NutritionReportAssembler,
    NutritionReportPdfRenderer,
    ReportSection,
)
from nutricare.utils import DataIntegrityError, ReportGenerationError
from tests.factories import FIXED_NOW, utc


@pytest.fixture
def assembler() -> NutritionReportAssembler:
    return NutritionReportAssembler()


def _assemble(assembler, patient, anthropometry=(), labs=(), consultations=(),
              plan=None, guidance=None):
    return assembler.assemble(
        patient=patient,
        anthropometry=list(anthropometry),
        lab_results=list(labs),
        consultations=list(consultations),
        active_plan=plan,
        latest_guidance=guidance,
        generated_at=FIXED_NOW,
    )


class TestNutritionReportAssembler:
    def test_patient_only(self, assembler, patient):
        report = _assemble(assembler, patient)

        assert report.section_titles == ["Dados do Paciente"]
        assert report.sections[0].content == (
            "Nome: Maria Souza\n"
            "Data de Nascimento: 20/07/1980\n"
            "Sexo: Feminino\n"
            "Email: maria@example.com\n"
            "Telefone: 11 99999-0000\n"
        )

    def test_optional_contact_lines_omitted(self, assembler):
        bare = Patient(
            id="p2", organization_id="org-1", full_name="João",
            birth_date=date(1975, 1, 5), sex=Sex.MALE,
        )
        content = _assemble(assembler, bare).sections[0].content
        assert "Email" not in content
        assert "Telefone" not in content
        assert "Sexo: Masculino" in content

    def test_three_section_scenario(self, assembler, patient, anthropometry_records, consultations):
        # 1 anthropometry record, 0 labs, 2 consultations, no plan, no guidance
        report = _assemble(
            assembler, patient,
            anthropometry=anthropometry_records[:1],
            consultations=consultations,
        )
        assert report.section_titles == [
            "Dados do Paciente",
            "Antropometria",
            "Histórico de Consultas",
        ]

    def test_full_report_order(
        self, assembler, patient, anthropometry_records, lab_results, consultations,
        active_plan, guidance,
    ):
        report = _assemble(
            assembler, patient, anthropometry_records, lab_results, consultations,
            active_plan, guidance,
        )
        assert report.section_titles == [
            "Dados do Paciente",
            "Antropometria",
            "Exames Laboratoriais",
            "Histórico de Consultas",
            "Plano Nutricional Ativo",
            "Condutas Gerais",
        ]

    def test_no_lab_section_without_results(self, assembler, patient, consultations):
        report = _assemble(assembler, patient, consultations=consultations)
        assert "Exames Laboratoriais" not in report.section_titles
        assert all(section.content for section in report.sections)

    def test_anthropometry_uses_most_recent_only(self, assembler, patient):
        newest = AnthropometryRecord(
            id="a2", patient_id="pat-1", date=utc(2024, 5, 10),
            weight_kg=70.5, height_m=1.62, bmi=26.8634, notes="Boa adesão",
        )
        older = AnthropometryRecord(
            id="a1", patient_id="pat-1", date=utc(2024, 1, 10), weight_kg=72.0,
        )
        content = _assemble(assembler, patient, anthropometry=[newest, older]).sections[1].content

        assert content == (
            "Última avaliação: 10/05/2024\n\n"
            "Peso: 70.5 kg\n"
            "Altura: 1.62 m\n"
            "IMC: 26.86\n"
            "\nObservações: Boa adesão"
        )
        assert "72" not in content

    def test_missing_most_recent_anthropometry(self, assembler, patient):
        with pytest.raises(DataIntegrityError) as exc_info:
            _assemble(assembler, patient, anthropometry=[None])
        assert exc_info.value.code == "DATA_INTEGRITY_ERROR"

    def test_lab_results_truncated_to_ten(self, assembler, patient):
        labs = [
            LabResult(
                id=f"l{i}", patient_id="pat-1", date=utc(2024, 5, 1) - timedelta(days=i),
                test_type=LabTestType.OTHER, name=f"Exame {i}",
                value=parse_lab_value(i), unit="u",
            )
            for i in range(14)
        ]
        content = _assemble(assembler, patient, labs=labs).sections[1].content

        lines = content.split("\n")
        assert len(lines) == 10
        assert lines[0] == "01/05/2024 - Exame 0: 0 u"
        assert "Exame 10" not in content

    def test_lab_line_with_reference_and_raw_value(self, assembler, patient, lab_results):
        content = _assemble(assembler, patient, labs=lab_results).sections[1].content
        assert content.split("\n") == [
            "02/04/2024 - Hemoglobina glicada: <5.7 % (Referência: < 5.7)",
            "02/04/2024 - Glicemia de jejum: 98 mg/dL (Referência: 70-99)",
        ]

    def test_consultations_truncated_to_five(self, assembler, patient):
        consultations = [
            Consultation(
                id=f"c{i}", patient_id="pat-1", professional_id="prof-1",
                date_time=utc(2024, 5, 20 - i, 10, 0), type=ConsultationType.FOLLOW_UP,
                main_complaint=f"Queixa {i}",
            )
            for i in range(8)
        ]
        content = _assemble(assembler, patient, consultations=consultations).sections[1].content

        assert content.count(" - Retorno") == 5
        assert "Queixa 4" in content
        assert "Queixa 5" not in content

    def test_consultation_block_format(self, assembler, patient, consultations):
        content = _assemble(assembler, patient, consultations=consultations).sections[1].content
        assert content == (
            "10/01/2024 14:30 - Consulta Inicial\n"
            "Queixa Principal: Ganho de peso\n"
            "Diagnóstico Nutricional: Ingestão energética excessiva\n"
            "\n"
            "10/05/2024 10:00 - Retorno"
        )

    def test_active_plan_section(self, assembler, patient, active_plan):
        content = _assemble(assembler, patient, plan=active_plan).sections[1].content
        assert content == (
            "Título: Plano de controle glicêmico\n"
            "Objetivos: Reduzir HbA1c e peso\n"
            "\nRefeições:\n"
            "\nCafé da Manhã:\n"
            "Pão integral com ovo\n"
            "Observação: Sem açúcar\n"
            "\nAlmoço:\n"
            "Arroz, feijão, salada e frango\n"
            "\nObservações: Revisar em 30 dias"
        )

    def test_guidance_section(self, assembler, patient, guidance):
        content = _assemble(assembler, patient, guidance=guidance).sections[1].content
        assert content == (
            "Data: 10/05/2024\n\n"
            "Hidratação:\n2 litros de água por dia\n\n"
            "Sono:\nDormir 8 horas"
        )

    def test_to_dict(self, assembler, patient):
        data = _assemble(assembler, patient).to_dict()
        assert data["patient_id"] == "pat-1"
        assert data["report_date"] == FIXED_NOW.isoformat()
        assert data["sections"][0]["title"] == "Dados do Paciente"


class TestNutritionReportPdfRenderer:
    def test_render_writes_pdf(self, tmp_path, assembler, patient, consultations, active_plan):
        renderer = NutritionReportPdfRenderer(output_dir=str(tmp_path))
        report = _assemble(assembler, patient, consultations=consultations, plan=active_plan)

        path = renderer.render(report)

        assert os.path.exists(path)
        assert os.path.basename(path) == "NR-pat-1-20240615-120000.pdf"
        with open(path, "rb") as f:
            assert f.read(4) == b"%PDF"

    def test_markup_characters_are_escaped(self, tmp_path):
        renderer = NutritionReportPdfRenderer(output_dir=str(tmp_path))
        report = NutritionReport(
            patient_id="p<1>", patient_name="Ana & <Bia>", report_date=FIXED_NOW,
            sections=[ReportSection("Exames Laboratoriais", "HbA1c: <5.7 %")],
        )
        path = renderer.render(report, filename="escaped.pdf")
        assert os.path.exists(path)

    def test_build_failure_raises_report_error(self, tmp_path, assembler, patient):
        renderer = NutritionReportPdfRenderer(output_dir=str(tmp_path))
        report = _assemble(assembler, patient)

        with pytest.raises(ReportGenerationError):
            renderer.render(report, filename=os.path.join("missing-dir", "report.pdf"))
