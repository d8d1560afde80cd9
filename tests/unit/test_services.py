"""
Unit Tests for Use-Case Services

Each service runs against the seeded in-memory store and a scripted gateway.
"""
from unittest.mock import AsyncMock, patch

import pytest

from nutricare.core.domain import (
    DateRange,
    EducationContext,
    ProgramSummaryType,
    RequestContext,
    SummaryType,
)
from nutricare.core.llm import GenerationMode
from nutricare.core.reports import NutritionReportPdfRenderer
from nutricare.services import (
    DiagnosisSuggestionRequest,
    DiagnosisSuggestionService,
    EducationMaterialRequest,
    EducationMaterialService,
    NutritionReportService,
    PatientSummaryRequest,
    PatientSummaryService,
    ProgramSummaryRequest,
    ProgramSummaryService,
)
from nutricare.utils import GenerationError, NotFoundError, ValidationError
from tests.factories import FIXED_NOW, ORG_ID, OTHER_ORG_ID, PROFESSIONAL_ID, ScriptedGateway, utc

CONTEXT = RequestContext(organization_id=ORG_ID, professional_id=PROFESSIONAL_ID)


class TestNutritionReportService:
    async def test_report_sections(self, store, fixed_clock):
        service = NutritionReportService(store, clock=fixed_clock)

        report = await service.generate(CONTEXT, "pat-1")

        assert report.patient_name == "Maria Souza"
        assert report.report_date == FIXED_NOW
        assert len(report.sections) == 6

    async def test_other_organization_is_not_found(self, store, fixed_clock):
        service = NutritionReportService(store, clock=fixed_clock)

        with pytest.raises(NotFoundError) as exc_info:
            await service.generate(RequestContext(OTHER_ORG_ID), "pat-1")
        assert exc_info.value.details["organization_id"] == OTHER_ORG_ID

    async def test_pdf(self, store, fixed_clock, tmp_path):
        service = NutritionReportService(
            store,
            pdf_renderer=NutritionReportPdfRenderer(output_dir=str(tmp_path)),
            clock=fixed_clock,
        )
        path = await service.generate_pdf(CONTEXT, "pat-1")
        assert path.endswith("NR-pat-1-20240615-120000.pdf")


class TestPatientSummaryService:
    def _service(self, store, gateway, fixed_clock):
        return PatientSummaryService(store, store, gateway, clock=fixed_clock)

    async def test_generates_and_persists(self, store, gateway, fixed_clock):
        service = self._service(store, gateway, fixed_clock)

        artifact = await service.generate(
            CONTEXT, PatientSummaryRequest("pat-1", SummaryType.PRE_CONSULT)
        )

        assert artifact.text == "Resumo gerado."
        assert artifact.type == SummaryType.PRE_CONSULT
        assert artifact.professional_id == PROFESSIONAL_ID
        assert artifact.created_at == FIXED_NOW
        assert artifact.period_start is None
        assert store.summaries == [artifact]

        payload, mode = gateway.calls[0]
        assert mode == GenerationMode.PATIENT_SUMMARY
        assert len(payload.consultations) == 2
        assert payload.active_plan is not None

    async def test_period_restricts_records(self, store, gateway, fixed_clock):
        service = self._service(store, gateway, fixed_clock)
        period = DateRange(start=utc(2024, 5, 1), end=utc(2024, 5, 31))

        artifact = await service.generate(
            CONTEXT, PatientSummaryRequest("pat-1", SummaryType.WEEKLY_OVERVIEW, period)
        )

        payload, _ = gateway.calls[0]
        assert [c.date for c in payload.consultations] == [utc(2024, 5, 10, 10, 0)]
        assert [r.weight_kg for r in payload.anthropometry] == [70.5]
        assert payload.lab_results == []
        # the active plan ignores the period
        assert payload.active_plan is not None
        assert artifact.period_start == utc(2024, 5, 1)
        assert artifact.period_end == utc(2024, 5, 31)

    async def test_unknown_patient(self, store, gateway, fixed_clock):
        service = self._service(store, gateway, fixed_clock)

        with pytest.raises(NotFoundError):
            await service.generate(
                CONTEXT, PatientSummaryRequest("missing", SummaryType.FULL_HISTORY)
            )
        assert gateway.calls == []
        assert store.summaries == []

    async def test_patient_of_another_organization(self, store, gateway, fixed_clock):
        service = self._service(store, gateway, fixed_clock)
        context = RequestContext(OTHER_ORG_ID, PROFESSIONAL_ID)

        with pytest.raises(NotFoundError):
            await service.generate(
                context, PatientSummaryRequest("pat-1", SummaryType.FULL_HISTORY)
            )
        assert gateway.calls == []

    async def test_professional_required(self, store, gateway, fixed_clock):
        service = self._service(store, gateway, fixed_clock)

        with pytest.raises(ValidationError) as exc_info:
            await service.generate(
                RequestContext(ORG_ID), PatientSummaryRequest("pat-1", SummaryType.FULL_HISTORY)
            )
        assert exc_info.value.field == "professional_id"

    async def test_generation_failure_persists_nothing(self, store, failing_gateway, fixed_clock):
        service = self._service(store, failing_gateway, fixed_clock)

        with pytest.raises(GenerationError):
            await service.generate(
                CONTEXT, PatientSummaryRequest("pat-1", SummaryType.FULL_HISTORY)
            )
        assert store.summaries == []

    async def test_history_newest_first(self, store, gateway):
        moments = iter([utc(2024, 6, 1), utc(2024, 6, 10), utc(2024, 6, 5)])
        store.clock = lambda: next(moments)
        service = PatientSummaryService(store, store, gateway)

        for kind in (SummaryType.FULL_HISTORY, SummaryType.PRE_CONSULT, SummaryType.FULL_HISTORY):
            await service.generate(CONTEXT, PatientSummaryRequest("pat-1", kind))

        history = await service.history(CONTEXT, "pat-1")
        assert [a.created_at for a in history] == [
            utc(2024, 6, 10), utc(2024, 6, 5), utc(2024, 6, 1),
        ]

        only_full = await service.history(CONTEXT, "pat-1", SummaryType.FULL_HISTORY)
        assert len(only_full) == 2

        other_org = await service.history(RequestContext(OTHER_ORG_ID), "pat-1")
        assert other_org == []


class TestProgramSummaryService:
    async def test_overview(self, store, gateway):
        service = ProgramSummaryService(store, store, gateway)

        artifact = await service.generate(CONTEXT, ProgramSummaryRequest("prog-1"))

        assert artifact.type == ProgramSummaryType.PROGRAM_OVERVIEW
        assert artifact.meeting_id is None
        payload, mode = gateway.calls[0]
        assert mode == GenerationMode.PROGRAM_SUMMARY
        assert len(payload.meetings) == 2

    async def test_meeting_summary_unmatched_meeting_still_persists(self, store, gateway):
        service = ProgramSummaryService(store, store, gateway)

        artifact = await service.generate(
            CONTEXT,
            ProgramSummaryRequest("prog-1", ProgramSummaryType.MEETING_SUMMARY, "unknown"),
        )

        payload, _ = gateway.calls[0]
        assert payload.meetings == []
        assert artifact.meeting_id == "unknown"
        assert len(store.program_summaries) == 1

    async def test_program_of_another_organization(self, store, gateway):
        service = ProgramSummaryService(store, store, gateway)

        with pytest.raises(NotFoundError):
            await service.generate(RequestContext(OTHER_ORG_ID), ProgramSummaryRequest("prog-1"))
        assert gateway.calls == []

    async def test_failure_persists_nothing(self, store, failing_gateway):
        service = ProgramSummaryService(store, store, failing_gateway)

        with pytest.raises(GenerationError):
            await service.generate(CONTEXT, ProgramSummaryRequest("prog-1"))
        assert store.program_summaries == []

    async def test_history_filters_by_meeting(self, store, gateway):
        service = ProgramSummaryService(store, store, gateway)
        await service.generate(CONTEXT, ProgramSummaryRequest("prog-1"))
        await service.generate(
            CONTEXT, ProgramSummaryRequest("prog-1", ProgramSummaryType.MEETING_SUMMARY, "meet-1")
        )

        history = await service.history(CONTEXT, "prog-1", meeting_id="meet-1")
        assert [a.type for a in history] == [ProgramSummaryType.MEETING_SUMMARY]


class TestDiagnosisSuggestionService:
    async def test_parses_fenced_answer(self, store, fixed_clock):
        gateway = ScriptedGateway(
            response='```json\n[{"title": "Ingestão energética excessiva", '
                     '"pesFormat": "P relacionado a E evidenciado por S", '
                     '"rationale": "Ganho de peso"}]\n```'
        )
        service = DiagnosisSuggestionService(store, store, gateway, clock=fixed_clock)

        artifact = await service.generate(
            CONTEXT, DiagnosisSuggestionRequest("pat-1", consultation_id="con-2")
        )

        assert [d.title for d in artifact.diagnoses] == ["Ingestão energética excessiva"]
        assert artifact.consultation_id == "con-2"
        assert store.diagnosis_suggestions == [artifact]

        payload, mode = gateway.calls[0]
        assert mode == GenerationMode.NUTRITION_DIAGNOSIS
        assert payload.recent_anthropometry.weight_kg == 70.5

    async def test_malformed_answer_persists_nothing(self, store, fixed_clock):
        gateway = ScriptedGateway(response="Não foi possível gerar diagnósticos.")
        service = DiagnosisSuggestionService(store, store, gateway, clock=fixed_clock)

        with pytest.raises(GenerationError) as exc_info:
            await service.generate(CONTEXT, DiagnosisSuggestionRequest("pat-1"))
        assert exc_info.value.reason == GenerationError.MALFORMED_RESPONSE
        assert store.diagnosis_suggestions == []

    async def test_unknown_patient(self, store, gateway, fixed_clock):
        service = DiagnosisSuggestionService(store, store, gateway, clock=fixed_clock)

        with pytest.raises(NotFoundError):
            await service.generate(CONTEXT, DiagnosisSuggestionRequest("missing"))
        assert gateway.calls == []


class TestEducationMaterialService:
    async def test_individual(self, store, gateway, fixed_clock):
        service = EducationMaterialService(store, store, gateway, clock=fixed_clock)

        artifact = await service.generate(
            CONTEXT,
            EducationMaterialRequest(
                "Contagem de carboidratos", EducationContext.INDIVIDUAL, patient_id="pat-1"
            ),
        )

        assert artifact.patient_id == "pat-1"
        payload, mode = gateway.calls[0]
        assert mode == GenerationMode.EDUCATION_MATERIAL
        assert payload.patient_info.name == "Maria Souza"
        assert payload.program_info is None

    async def test_group_ignores_patient_id(self, store, gateway, fixed_clock):
        service = EducationMaterialService(store, store, gateway, clock=fixed_clock)

        await service.generate(
            CONTEXT,
            EducationMaterialRequest(
                "Rótulos", EducationContext.GROUP, patient_id="missing", program_id="prog-1"
            ),
        )

        payload, _ = gateway.calls[0]
        assert payload.patient_info is None
        assert payload.program_info.name == "Emagrecimento Saudável"

    async def test_empty_topic(self, store, gateway, fixed_clock):
        service = EducationMaterialService(store, store, gateway, clock=fixed_clock)

        with pytest.raises(ValidationError):
            await service.generate(
                CONTEXT, EducationMaterialRequest("   ", EducationContext.GROUP)
            )

    async def test_unknown_program(self, store, gateway, fixed_clock):
        service = EducationMaterialService(store, store, gateway, clock=fixed_clock)

        with pytest.raises(NotFoundError):
            await service.generate(
                CONTEXT,
                EducationMaterialRequest("Rótulos", EducationContext.GROUP, program_id="nope"),
            )
        assert store.education_materials == []


class TestAccessorFailures:
    """A failing read aborts the use-case unchanged: no generation, no artifact."""

    @pytest.fixture
    def lab_outage(self, store):
        with patch.object(
            store, "list_lab_results",
            AsyncMock(side_effect=RuntimeError("lab results backend unavailable")),
        ):
            yield store

    async def test_report_propagates(self, lab_outage, fixed_clock):
        service = NutritionReportService(lab_outage, clock=fixed_clock)

        with pytest.raises(RuntimeError, match="backend unavailable") as exc_info:
            await service.generate(CONTEXT, "pat-1")
        assert type(exc_info.value) is RuntimeError

    async def test_patient_summary_propagates(self, lab_outage, gateway, fixed_clock):
        service = PatientSummaryService(lab_outage, lab_outage, gateway, clock=fixed_clock)

        with pytest.raises(RuntimeError) as exc_info:
            await service.generate(
                CONTEXT, PatientSummaryRequest("pat-1", SummaryType.FULL_HISTORY)
            )
        assert type(exc_info.value) is RuntimeError
        assert gateway.calls == []
        assert lab_outage.summaries == []

    async def test_diagnosis_propagates(self, lab_outage, gateway, fixed_clock):
        service = DiagnosisSuggestionService(lab_outage, lab_outage, gateway, clock=fixed_clock)

        with pytest.raises(RuntimeError) as exc_info:
            await service.generate(CONTEXT, DiagnosisSuggestionRequest("pat-1"))
        assert type(exc_info.value) is RuntimeError
        assert gateway.calls == []
        assert lab_outage.diagnosis_suggestions == []

    async def test_program_lookup_failure_propagates(self, store, gateway):
        service = ProgramSummaryService(store, store, gateway)

        with patch.object(store, "find_program", AsyncMock(side_effect=ConnectionError("db down"))):
            with pytest.raises(ConnectionError):
                await service.generate(CONTEXT, ProgramSummaryRequest("prog-1"))
        assert gateway.calls == []
        assert store.program_summaries == []
