"""
In-Memory Clinical Store

Implements ClinicalDataAccessors and SummaryPersistence over plain
dictionaries. Used by the HTTP app (optionally seeded from a JSON file) and
by the test-suite.

Seed file layout (all keys optional):

    {
      "patients": [...], "anthropometry": [...], "lab_results": [...],
      "consultations": [...], "nutrition_plans": [...], "guidance": [...],
      "programs": [...]
    }

Field names match the entity dataclasses; timestamps are ISO-8601 strings.
Lab values may be JSON numbers or strings.
"""
import json
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import TypeAdapter

from nutricare.core.domain import (
    AnthropometryRecord,
    Consultation,
    DateRange,
    DiagnosisSuggestion,
    DiagnosisSuggestionArtifact,
    EducationContext,
    EducationMaterialArtifact,
    GeneralGuidance,
    LabResult,
    NutritionPlan,
    Patient,
    Program,
    ProgramSummaryArtifact,
    ProgramSummaryType,
    SummaryArtifact,
    SummaryType,
    as_utc,
    parse_lab_value,
)
from nutricare.utils import DataIntegrityError, get_logger

logger = get_logger(__name__)


def _newest_first(items: Sequence[Any], key: Callable[[Any], datetime]) -> List[Any]:
    return sorted(items, key=lambda item: as_utc(key(item)), reverse=True)


def _in_period(moment: datetime, period: Optional[DateRange]) -> bool:
    return period is None or period.contains(moment)


class InMemoryClinicalStore:
    """Dictionary-backed accessors and artifact persistence."""

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.clock = clock
        self.patients: Dict[str, Patient] = {}
        self.anthropometry: Dict[str, List[AnthropometryRecord]] = defaultdict(list)
        self.lab_results: Dict[str, List[LabResult]] = defaultdict(list)
        self.consultations: Dict[str, List[Consultation]] = defaultdict(list)
        self.nutrition_plans: Dict[str, List[NutritionPlan]] = defaultdict(list)
        self.guidance: Dict[str, List[GeneralGuidance]] = defaultdict(list)
        self.programs: Dict[str, Program] = {}

        self.summaries: List[SummaryArtifact] = []
        self.program_summaries: List[ProgramSummaryArtifact] = []
        self.diagnosis_suggestions: List[DiagnosisSuggestionArtifact] = []
        self.education_materials: List[EducationMaterialArtifact] = []

    # ── Population ────────────────────────────────────────────────────────

    def add_patient(self, patient: Patient) -> Patient:
        self.patients[patient.id] = patient
        return patient

    def add_anthropometry(self, record: AnthropometryRecord) -> AnthropometryRecord:
        self._require_known_patient(record.patient_id, "anthropometry")
        self.anthropometry[record.patient_id].append(record)
        return record

    def add_lab_result(self, result: LabResult) -> LabResult:
        self._require_known_patient(result.patient_id, "lab_results")
        self.lab_results[result.patient_id].append(result)
        return result

    def add_consultation(self, consultation: Consultation) -> Consultation:
        self._require_known_patient(consultation.patient_id, "consultations")
        self.consultations[consultation.patient_id].append(consultation)
        return consultation

    def add_nutrition_plan(self, plan: NutritionPlan) -> NutritionPlan:
        self._require_known_patient(plan.patient_id, "nutrition_plans")
        self.nutrition_plans[plan.patient_id].append(plan)
        return plan

    def add_guidance(self, guidance: GeneralGuidance) -> GeneralGuidance:
        self._require_known_patient(guidance.patient_id, "guidance")
        self.guidance[guidance.patient_id].append(guidance)
        return guidance

    def add_program(self, program: Program) -> Program:
        self.programs[program.id] = program
        return program

    def _require_known_patient(self, patient_id: str, source: str) -> None:
        if patient_id not in self.patients:
            raise DataIntegrityError(
                f"Record references unknown patient {patient_id}", source=source
            )

    def _patient_in_org(self, patient_id: str, organization_id: str) -> bool:
        patient = self.patients.get(patient_id)
        return patient is not None and patient.organization_id == organization_id

    # ── ClinicalDataAccessors ─────────────────────────────────────────────

    async def find_patient(self, patient_id: str, organization_id: str) -> Optional[Patient]:
        if not self._patient_in_org(patient_id, organization_id):
            return None
        return self.patients[patient_id]

    async def list_anthropometry(
        self,
        patient_id: str,
        organization_id: str,
        period: Optional[DateRange] = None,
    ) -> List[AnthropometryRecord]:
        if not self._patient_in_org(patient_id, organization_id):
            return []
        records = [r for r in self.anthropometry[patient_id] if _in_period(r.date, period)]
        return _newest_first(records, lambda r: r.date)

    async def list_lab_results(
        self,
        patient_id: str,
        organization_id: str,
        period: Optional[DateRange] = None,
    ) -> List[LabResult]:
        if not self._patient_in_org(patient_id, organization_id):
            return []
        results = [r for r in self.lab_results[patient_id] if _in_period(r.date, period)]
        return _newest_first(results, lambda r: r.date)

    async def list_consultations(
        self,
        organization_id: str,
        patient_id: Optional[str] = None,
        period: Optional[DateRange] = None,
    ) -> List[Consultation]:
        if patient_id is not None:
            candidates = [patient_id] if self._patient_in_org(patient_id, organization_id) else []
        else:
            candidates = [
                pid for pid, p in self.patients.items() if p.organization_id == organization_id
            ]
        consultations = [
            c
            for pid in candidates
            for c in self.consultations[pid]
            if _in_period(c.date_time, period)
        ]
        return _newest_first(consultations, lambda c: c.date_time)

    async def find_active_nutrition_plan(
        self, patient_id: str, organization_id: str
    ) -> Optional[NutritionPlan]:
        if not self._patient_in_org(patient_id, organization_id):
            return None
        active = [p for p in self.nutrition_plans[patient_id] if p.is_active]
        if len(active) > 1:
            logger.warning(f"Patient {patient_id} has {len(active)} active plans; using the latest")
        return active[-1] if active else None

    async def find_latest_guidance(
        self, patient_id: str, organization_id: str
    ) -> Optional[GeneralGuidance]:
        if not self._patient_in_org(patient_id, organization_id):
            return None
        ordered = _newest_first(self.guidance[patient_id], lambda g: g.date)
        return ordered[0] if ordered else None

    async def find_program(self, program_id: str, organization_id: str) -> Optional[Program]:
        program = self.programs.get(program_id)
        if program is None or program.organization_id != organization_id:
            return None
        return program

    # ── SummaryPersistence ────────────────────────────────────────────────

    async def persist_summary(
        self,
        *,
        organization_id: str,
        patient_id: str,
        professional_id: str,
        summary_type: SummaryType,
        text: str,
        period: Optional[DateRange] = None,
    ) -> SummaryArtifact:
        artifact = SummaryArtifact(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            patient_id=patient_id,
            professional_id=professional_id,
            type=summary_type,
            text=text,
            created_at=self.clock(),
            period_start=period.start if period else None,
            period_end=period.end if period else None,
        )
        self.summaries.append(artifact)
        return artifact

    async def persist_program_summary(
        self,
        *,
        organization_id: str,
        program_id: str,
        summary_type: ProgramSummaryType,
        text: str,
        meeting_id: Optional[str] = None,
    ) -> ProgramSummaryArtifact:
        artifact = ProgramSummaryArtifact(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            program_id=program_id,
            type=summary_type,
            text=text,
            created_at=self.clock(),
            meeting_id=meeting_id,
        )
        self.program_summaries.append(artifact)
        return artifact

    async def persist_diagnosis_suggestion(
        self,
        *,
        organization_id: str,
        patient_id: str,
        professional_id: str,
        diagnoses: Sequence[DiagnosisSuggestion],
        consultation_id: Optional[str] = None,
    ) -> DiagnosisSuggestionArtifact:
        artifact = DiagnosisSuggestionArtifact(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            patient_id=patient_id,
            professional_id=professional_id,
            diagnoses=tuple(diagnoses),
            created_at=self.clock(),
            consultation_id=consultation_id,
        )
        self.diagnosis_suggestions.append(artifact)
        return artifact

    async def persist_education_material(
        self,
        *,
        organization_id: str,
        topic: str,
        context: EducationContext,
        text: str,
        patient_id: Optional[str] = None,
        program_id: Optional[str] = None,
    ) -> EducationMaterialArtifact:
        artifact = EducationMaterialArtifact(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            topic=topic,
            context=context,
            text=text,
            created_at=self.clock(),
            patient_id=patient_id,
            program_id=program_id,
        )
        self.education_materials.append(artifact)
        return artifact

    async def list_summaries(
        self,
        organization_id: str,
        patient_id: str,
        summary_type: Optional[SummaryType] = None,
        created: Optional[DateRange] = None,
    ) -> List[SummaryArtifact]:
        matches = [
            s for s in self.summaries
            if s.organization_id == organization_id
            and s.patient_id == patient_id
            and (summary_type is None or s.type == summary_type)
            and _in_period(s.created_at, created)
        ]
        return _newest_first(matches, lambda s: s.created_at)

    async def list_program_summaries(
        self,
        organization_id: str,
        program_id: str,
        summary_type: Optional[ProgramSummaryType] = None,
        meeting_id: Optional[str] = None,
    ) -> List[ProgramSummaryArtifact]:
        matches = [
            s for s in self.program_summaries
            if s.organization_id == organization_id
            and s.program_id == program_id
            and (summary_type is None or s.type == summary_type)
            and (meeting_id is None or s.meeting_id == meeting_id)
        ]
        return _newest_first(matches, lambda s: s.created_at)

    # ── Seeding ───────────────────────────────────────────────────────────

    @classmethod
    def from_seed(cls, data: Dict[str, Any], **kwargs) -> "InMemoryClinicalStore":
        """
        Build a store from a decoded seed document.

        Raises:
            DataIntegrityError: a record does not match its entity shape or
                references an unknown patient.
        """
        store = cls(**kwargs)
        try:
            for patient in _PATIENTS.validate_python(data.get("patients", [])):
                store.add_patient(patient)
            for record in _ANTHROPOMETRY.validate_python(data.get("anthropometry", [])):
                store.add_anthropometry(record)
            lab_rows = [
                {**row, "value": parse_lab_value(row["value"])}
                for row in data.get("lab_results", [])
            ]
            for result in _LAB_RESULTS.validate_python(lab_rows):
                store.add_lab_result(result)
            for consultation in _CONSULTATIONS.validate_python(data.get("consultations", [])):
                store.add_consultation(consultation)
            for plan in _PLANS.validate_python(data.get("nutrition_plans", [])):
                store.add_nutrition_plan(plan)
            for guidance in _GUIDANCE.validate_python(data.get("guidance", [])):
                store.add_guidance(guidance)
            for program in _PROGRAMS.validate_python(data.get("programs", [])):
                store.add_program(program)
        except (KeyError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            raise DataIntegrityError(f"Invalid seed data: {e}", source="seed") from e

        logger.info(
            f"Seeded store: {len(store.patients)} patient(s), {len(store.programs)} program(s)"
        )
        return store

    @classmethod
    def load_json(cls, path: Union[str, Path], **kwargs) -> "InMemoryClinicalStore":
        """Read a seed file from disk."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        logger.info(f"Loading seed data from {path}")
        return cls.from_seed(data, **kwargs)


_PATIENTS = TypeAdapter(List[Patient])
_ANTHROPOMETRY = TypeAdapter(List[AnthropometryRecord])
_LAB_RESULTS = TypeAdapter(List[LabResult])
_CONSULTATIONS = TypeAdapter(List[Consultation])
_PLANS = TypeAdapter(List[NutritionPlan])
_GUIDANCE = TypeAdapter(List[GeneralGuidance])
_PROGRAMS = TypeAdapter(List[Program])
