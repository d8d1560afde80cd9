"""
Derived Metrics Layer

Usage:
    from nutricare.core.metrics import age, extract_diagnoses, variation

    years = age(patient.birth_date, today)
    labels = extract_diagnoses(patient.tags, patient.notes)
"""
from .derived import (
    DIAGNOSIS_KEYWORDS,
    CONDITION_KEYWORDS,
    Variation,
    ProgramEvolutionSummary,
    age,
    extract_diagnoses,
    variation,
    attendance_rate,
    halves_delta,
    program_evolution,
    months_before,
)

__all__ = [
    "DIAGNOSIS_KEYWORDS",
    "CONDITION_KEYWORDS",
    "Variation",
    "ProgramEvolutionSummary",
    "age",
    "extract_diagnoses",
    "variation",
    "attendance_rate",
    "halves_delta",
    "program_evolution",
    "months_before",
]
