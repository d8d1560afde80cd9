"""
Pytest Configuration and Fixtures

Shared fixtures for the aggregation pipeline tests: a seeded in-memory store,
a fixed clock and a scripted generation gateway.
"""
from datetime import date
from typing import List

import pytest

from nutricare.core.domain import (
    AnthropometryRecord,
    Consultation,
    ConsultationType,
    GeneralGuidance,
    LabResult,
    LabTestType,
    MeetingRecord,
    NutritionPlan,
    NutritionPlanMeal,
    MealType,
    Patient,
    Program,
    ProgramMeeting,
    ProgramParticipant,
    ProgramStatus,
    Sex,
    parse_lab_value,
)
from nutricare.infra import InMemoryClinicalStore
from nutricare.utils import GenerationError
from tests.factories import FIXED_NOW, ORG_ID, PROFESSIONAL_ID, ScriptedGateway, utc


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-06-15 12:00 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def today() -> date:
    return FIXED_NOW.date()


@pytest.fixture
def patient() -> Patient:
    return Patient(
        id="pat-1",
        organization_id=ORG_ID,
        full_name="Maria Souza",
        birth_date=date(1980, 7, 20),
        sex=Sex.FEMALE,
        email="maria@example.com",
        phone="11 99999-0000",
        tags=["Diabetes tipo 2", "Vegetariana"],
        notes="Relata cansaço frequente.",
    )


@pytest.fixture
def anthropometry_records() -> List[AnthropometryRecord]:
    return [
        AnthropometryRecord(
            id="ant-1", patient_id="pat-1", date=utc(2024, 1, 10),
            weight_kg=72.0, height_m=1.62, bmi=27.43, waist_circumference=88.0,
        ),
        AnthropometryRecord(
            id="ant-2", patient_id="pat-1", date=utc(2024, 5, 10),
            weight_kg=70.5, height_m=1.62, bmi=26.86, waist_circumference=85.5,
            notes="Boa adesão ao plano",
        ),
    ]


@pytest.fixture
def lab_results() -> List[LabResult]:
    return [
        LabResult(
            id="lab-1", patient_id="pat-1", date=utc(2024, 4, 2),
            test_type=LabTestType.HBA1C, name="Hemoglobina glicada",
            value=parse_lab_value("<5.7"), unit="%", reference_range="< 5.7",
        ),
        LabResult(
            id="lab-2", patient_id="pat-1", date=utc(2024, 4, 2),
            test_type=LabTestType.GLYCEMIA, name="Glicemia de jejum",
            value=parse_lab_value(98), unit="mg/dL", reference_range="70-99",
        ),
    ]


@pytest.fixture
def consultations() -> List[Consultation]:
    return [
        Consultation(
            id="con-1", patient_id="pat-1", professional_id=PROFESSIONAL_ID,
            date_time=utc(2024, 1, 10, 14, 30), type=ConsultationType.INITIAL,
            main_complaint="Ganho de peso", nutrition_history="Pula o café da manhã",
            nutrition_diagnosis="Ingestão energética excessiva", plan="Fracionar refeições",
        ),
        Consultation(
            id="con-2", patient_id="pat-1", professional_id=PROFESSIONAL_ID,
            date_time=utc(2024, 5, 10, 10, 0), type=ConsultationType.FOLLOW_UP,
        ),
    ]


@pytest.fixture
def active_plan() -> NutritionPlan:
    return NutritionPlan(
        id="plan-1", patient_id="pat-1", title="Plano de controle glicêmico",
        goals="Reduzir HbA1c e peso", is_active=True, notes="Revisar em 30 dias",
        meals=[
            NutritionPlanMeal(MealType.BREAKFAST, "Pão integral com ovo", "Sem açúcar"),
            NutritionPlanMeal(MealType.LUNCH, "Arroz, feijão, salada e frango"),
        ],
    )


@pytest.fixture
def guidance() -> GeneralGuidance:
    return GeneralGuidance(
        id="gui-1", patient_id="pat-1", date=utc(2024, 5, 10),
        hydration_guidance="2 litros de água por dia",
        sleep_guidance="Dormir 8 horas",
    )


@pytest.fixture
def program() -> Program:
    participants = [
        ProgramParticipant(patient_id=f"pp-{i}", join_date=utc(2024, 2, 1))
        for i in range(1, 4)
    ]
    meetings = [
        # Stored out of chronological order on purpose
        ProgramMeeting(
            id="meet-2", date=utc(2024, 3, 1), topic="Rótulos de alimentos",
            records=[
                MeetingRecord("pp-1", True, weight_kg=79.0, bmi=29.0),
                MeetingRecord("pp-2", True, weight_kg=69.0, bmi=25.0),
                MeetingRecord("pp-3", False),
            ],
        ),
        ProgramMeeting(
            id="meet-1", date=utc(2024, 2, 1), topic="Alimentação saudável",
            notes="Apresentação do programa",
            records=[
                MeetingRecord("pp-1", True, weight_kg=80.0, bmi=29.4),
                MeetingRecord("pp-2", True, weight_kg=70.0, bmi=25.4),
                MeetingRecord("pp-3", True, weight_kg=90.0, bmi=31.0),
            ],
        ),
    ]
    return Program(
        id="prog-1", organization_id=ORG_ID, name="Emagrecimento Saudável",
        description="Programa de reeducação alimentar", status=ProgramStatus.ACTIVE,
        start_date=utc(2024, 2, 1), participants=participants, meetings=meetings,
    )


@pytest.fixture
def store(
    fixed_clock, patient, anthropometry_records, lab_results, consultations,
    active_plan, guidance, program,
) -> InMemoryClinicalStore:
    """Store holding one fully-documented patient and one program."""
    store = InMemoryClinicalStore(clock=fixed_clock)
    store.add_patient(patient)
    for record in anthropometry_records:
        store.add_anthropometry(record)
    for result in lab_results:
        store.add_lab_result(result)
    for consultation in consultations:
        store.add_consultation(consultation)
    store.add_nutrition_plan(active_plan)
    store.add_guidance(guidance)
    store.add_program(program)
    return store


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def failing_gateway() -> ScriptedGateway:
    return ScriptedGateway(
        error=GenerationError("Gemini API error: quota", mode="test", reason="provider_error")
    )
