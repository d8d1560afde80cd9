"""
Shared helpers for the use-case services.
"""
from datetime import datetime, timezone
from typing import Callable

from nutricare.core.domain import ClinicalDataAccessors, Patient, Program
from nutricare.utils import NotFoundError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def require_patient(
    accessors: ClinicalDataAccessors, patient_id: str, organization_id: str
) -> Patient:
    """Fetch a patient or raise NotFoundError; runs before any other read."""
    patient = await accessors.find_patient(patient_id, organization_id)
    if patient is None:
        raise NotFoundError("Patient", patient_id, {"organization_id": organization_id})
    return patient


async def require_program(
    accessors: ClinicalDataAccessors, program_id: str, organization_id: str
) -> Program:
    program = await accessors.find_program(program_id, organization_id)
    if program is None:
        raise NotFoundError("Program", program_id, {"organization_id": organization_id})
    return program
