"""
Program Summary Payload Builder

Structured input for group-program summaries in two modes:

- PROGRAM_OVERVIEW: every meeting of the program
- MEETING_SUMMARY: only the meeting named by meeting_id; with no id, or an
  id that matches nothing, the meeting list is empty (not an error)

Participant names are positional placeholders ("Participante N"); real
display names are not resolved on this path.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from nutricare.core.domain.artifacts import ProgramSummaryType
from nutricare.core.domain.entities import Program, ProgramMeeting
from nutricare.core.metrics import ProgramEvolutionSummary, program_evolution
from nutricare.utils import get_logger

logger = get_logger(__name__)

DEFAULT_OBJECTIVES = "Programa nutricional em grupo"


@dataclass(frozen=True)
class ParticipantFacts:
    id: str
    name: str
    join_date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "join_date": self.join_date.isoformat()}


@dataclass(frozen=True)
class MeetingFacts:
    id: str
    date: datetime
    topic: str
    notes: Optional[str]
    # Number of per-meeting records, not of invited participants
    participants_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "topic": self.topic,
            "notes": self.notes,
            "participants_count": self.participants_count,
        }


@dataclass
class ProgramSummaryPayload:
    mode: ProgramSummaryType
    program: Program
    objectives: str
    participants: List[ParticipantFacts] = field(default_factory=list)
    meetings: List[MeetingFacts] = field(default_factory=list)
    average_evolution: Optional[ProgramEvolutionSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "program": self.program.to_dict(),
            "objectives": self.objectives,
            "participants": [p.to_dict() for p in self.participants],
            "meetings": [m.to_dict() for m in self.meetings],
            "average_evolution": (
                self.average_evolution.to_dict() if self.average_evolution else None
            ),
        }


def chronological_meetings(program: Program) -> List[ProgramMeeting]:
    """Meetings oldest-first; ties keep storage order."""
    return sorted(program.meetings, key=lambda m: m.date)


class ProgramSummaryPromptBuilder:
    """Assembles a ProgramSummaryPayload from one program snapshot."""

    def build(
        self,
        program: Program,
        mode: ProgramSummaryType = ProgramSummaryType.PROGRAM_OVERVIEW,
        meeting_id: Optional[str] = None,
    ) -> ProgramSummaryPayload:
        participants = [
            ParticipantFacts(
                id=participant.patient_id,
                name=f"Participante {index}",
                join_date=participant.join_date,
            )
            for index, participant in enumerate(program.participants, start=1)
        ]

        meetings = chronological_meetings(program)
        meeting_facts = [
            MeetingFacts(
                id=m.id,
                date=m.date,
                topic=m.topic,
                notes=m.notes,
                participants_count=len(m.records),
            )
            for m in meetings
        ]

        # Evolution always spans the whole program, whatever the mode
        evolution = program_evolution(meetings, len(participants))

        if mode == ProgramSummaryType.MEETING_SUMMARY:
            relevant = [m for m in meeting_facts if meeting_id and m.id == meeting_id]
            if not relevant:
                logger.warning(
                    f"Meeting summary for program {program.id} has no matching meeting "
                    f"(meeting_id={meeting_id!r}); sending zero meetings"
                )
        else:
            relevant = meeting_facts

        return ProgramSummaryPayload(
            mode=mode,
            program=program,
            objectives=program.description or DEFAULT_OBJECTIVES,
            participants=participants,
            meetings=relevant,
            average_evolution=evolution,
        )
