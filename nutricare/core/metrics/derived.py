"""
Derived Metrics

Pure functions computing the values the report and summary builders derive
from raw records: calendar age, clinical-tag extraction, measurement
variation, program attendance and the halves-based evolution delta.

Nothing here touches storage or the clock; callers pass "today" explicitly.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from nutricare.core.domain.entities import MeetingRecord, ProgramMeeting

DateLike = Union[date, datetime]

# Localised clinical keywords; a tag is a diagnosis when it contains one of them.
DIAGNOSIS_KEYWORDS = (
    "diabetes",
    "hipertensão",
    "obesidade",
    "dislipidemia",
    "anemia",
    "intolerância",
    "alergia",
)

# Narrower set used for education-material patient context
CONDITION_KEYWORDS = DIAGNOSIS_KEYWORDS[:5]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def age(birth_date: DateLike, today: DateLike) -> int:
    """
    Integer calendar age on `today`.

    One year is subtracted while today's (month, day) precedes the birthday's,
    so 2000-03-01 is still 23 on 2024-02-29.
    """
    born = _as_date(birth_date)
    ref = _as_date(today)
    years = ref.year - born.year
    if (ref.month, ref.day) < (born.month, born.day):
        years -= 1
    return years


def extract_diagnoses(
    tags: Iterable[str],
    notes: Optional[str],
    keywords: Sequence[str] = DIAGNOSIS_KEYWORDS,
) -> List[str]:
    """
    Pick clinically relevant labels from a patient's tags.

    Tags containing a keyword are returned verbatim. Only when no tag
    matches are the notes scanned, and then the capitalised keyword itself
    is emitted rather than the surrounding text.
    """
    diagnoses = [
        tag for tag in tags
        if any(keyword in tag.lower() for keyword in keywords)
    ]
    if diagnoses or not notes:
        return diagnoses

    notes_lower = notes.lower()
    return [
        keyword[0].upper() + keyword[1:]
        for keyword in keywords
        if keyword in notes_lower
    ]


@dataclass(frozen=True)
class Variation:
    """Absolute change between two measurements and its direction."""
    magnitude: float
    is_increase: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"magnitude": self.magnitude, "is_increase": self.is_increase}


def variation(current: Optional[float], previous: Optional[float]) -> Optional[Variation]:
    """Change from `previous` to `current`; a zero change counts as an increase."""
    if current is None or previous is None:
        return None
    diff = current - previous
    return Variation(magnitude=abs(diff), is_increase=diff >= 0)


def attendance_rate(
    records: Iterable[MeetingRecord],
    participant_count: int,
    meeting_count: int,
) -> float:
    """
    Fraction of possible participant x meeting attendances marked present.

    Returns 0.0 when there are no participants or no meetings.
    """
    possible = participant_count * meeting_count
    if possible <= 0:
        return 0.0
    present = sum(1 for record in records if record.presence)
    return present / possible


def halves_delta(series: Sequence[float]) -> Optional[float]:
    """
    Mean of the second half minus mean of the first half.

    The split index is floor(len / 2); an odd element lands in the second
    half. Fewer than two points yield None.
    """
    if len(series) < 2:
        return None
    split = len(series) // 2
    first = np.asarray(series[:split], dtype=float)
    second = np.asarray(series[split:], dtype=float)
    return float(second.mean() - first.mean())


@dataclass(frozen=True)
class ProgramEvolutionSummary:
    average_weight_change: Optional[float]
    average_bmi_change: Optional[float]
    attendance_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_weight_change": self.average_weight_change,
            "average_bmi_change": self.average_bmi_change,
            "attendance_rate": self.attendance_rate,
        }


def program_evolution(
    meetings: Sequence[ProgramMeeting],
    participant_count: int,
) -> Optional[ProgramEvolutionSummary]:
    """
    Group-level evolution across every record of every meeting.

    Records are flattened in meeting order and compared first half against
    second half, not tracked per participant. None when there are no
    meetings or no records at all.
    """
    if not meetings:
        return None
    records = [record for meeting in meetings for record in meeting.records]
    if not records:
        return None

    weights = [r.weight_kg for r in records if r.weight_kg is not None]
    bmis = [r.bmi for r in records if r.bmi is not None]

    return ProgramEvolutionSummary(
        average_weight_change=halves_delta(weights),
        average_bmi_change=halves_delta(bmis),
        attendance_rate=attendance_rate(records, participant_count, len(meetings)),
    )


def months_before(reference: DateLike, months: int) -> date:
    """Same calendar day `months` earlier, clamped to the target month's length."""
    ref = _as_date(reference)
    month_index = ref.year * 12 + (ref.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(ref.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
