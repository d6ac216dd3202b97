"""Read-side aggregates assembled from several stored records."""

from dataclasses import dataclass, field
from typing import List, Optional

from .patient import Patient
from .session import Session, SessionParticipant
from .task import Task
from .user import User


@dataclass
class ParticipantWithUser:
    participant: SessionParticipant
    user: User


@dataclass
class SessionWithParticipants:
    session: Session
    participants: List[ParticipantWithUser] = field(default_factory=list)
    created_by: Optional[User] = None


@dataclass
class PatientWithTasks:
    patient: Patient
    tasks: List[Task] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    @property
    def cancelled_count(self) -> int:
        return sum(1 for task in self.tasks if task.cancelled)

    @property
    def incomplete_count(self) -> int:
        """Tasks neither completed nor cancelled."""
        return sum(1 for task in self.tasks if task.is_pending)


@dataclass(frozen=True)
class JoinEligibility:
    """Outcome of a join pre-check; ``reason`` is set when ``can_join`` is False."""

    can_join: bool
    reason: Optional[str] = None
    error_code: Optional[str] = None
