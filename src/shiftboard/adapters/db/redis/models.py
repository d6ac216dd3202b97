"""
Pydantic models for the JSON documents stored under each primary key.

Documents use camelCase attribute names, omit absent optional attributes and
render timestamps as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from ....core.utils.timeutils import format_timestamp
from ....domain.entities.patient import Patient
from ....domain.entities.session import Session, SessionParticipant
from ....domain.entities.task import Task
from ....domain.entities.user import User

Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str)]


class RedisRecord(BaseModel):
    """Base for documents stored as a single JSON string value."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    def dumps(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def loads(cls, raw: str):
        return cls.model_validate_json(raw)


class UserRecord(RedisRecord):
    id: str
    username: str
    created_at: Timestamp
    updated_at: Timestamp

    @classmethod
    def from_domain(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            username=user.username,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def to_domain(self) -> User:
        return User(
            id=self.id,
            username=self.username,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class SessionRecord(RedisRecord):
    id: str
    name: str
    created_at: Timestamp
    updated_at: Timestamp
    created_by_id: str
    # Omitted from the document when the session is unrestricted
    allowed_user_ids: Optional[List[str]] = None

    @classmethod
    def from_domain(cls, session: Session) -> "SessionRecord":
        return cls(
            id=session.id,
            name=session.name,
            created_at=session.created_at,
            updated_at=session.updated_at,
            created_by_id=session.created_by_id,
            allowed_user_ids=list(session.allowed_user_ids) or None,
        )

    def to_domain(self) -> Session:
        return Session(
            id=self.id,
            name=self.name,
            created_by_id=self.created_by_id,
            allowed_user_ids=list(self.allowed_user_ids or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ParticipantRecord(RedisRecord):
    id: str
    user_id: str
    session_id: str
    joined_at: Timestamp

    @classmethod
    def from_domain(cls, participant: SessionParticipant) -> "ParticipantRecord":
        return cls(
            id=participant.id,
            user_id=participant.user_id,
            session_id=participant.session_id,
            joined_at=participant.joined_at,
        )

    def to_domain(self) -> SessionParticipant:
        return SessionParticipant(
            id=self.id,
            user_id=self.user_id,
            session_id=self.session_id,
            joined_at=self.joined_at,
        )


class PatientRecord(RedisRecord):
    id: str
    tc_no: str
    name: Optional[str] = None
    created_at: Timestamp
    updated_at: Timestamp
    created_by_id: str
    session_id: str
    completed: bool = False
    completed_at: Optional[Timestamp] = None
    completed_by_id: Optional[str] = None

    @classmethod
    def from_domain(cls, patient: Patient) -> "PatientRecord":
        return cls(
            id=patient.id,
            tc_no=patient.tc_no,
            name=patient.name,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
            created_by_id=patient.created_by_id,
            session_id=patient.session_id,
            completed=patient.completed,
            completed_at=patient.completed_at,
            completed_by_id=patient.completed_by_id,
        )

    def to_domain(self) -> Patient:
        return Patient(
            id=self.id,
            tc_no=self.tc_no,
            session_id=self.session_id,
            created_by_id=self.created_by_id,
            name=self.name,
            completed=self.completed,
            completed_at=self.completed_at,
            completed_by_id=self.completed_by_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TaskRecord(RedisRecord):
    id: str
    name: str
    completed: bool = False
    cancelled: bool = False
    created_at: Timestamp
    updated_at: Timestamp
    patient_id: str
    created_by_id: str
    completed_by_id: Optional[str] = None
    completed_at: Optional[Timestamp] = None
    cancelled_by_id: Optional[str] = None
    cancelled_at: Optional[Timestamp] = None

    @classmethod
    def from_domain(cls, task: Task) -> "TaskRecord":
        return cls(
            id=task.id,
            name=task.name,
            completed=task.completed,
            cancelled=task.cancelled,
            created_at=task.created_at,
            updated_at=task.updated_at,
            patient_id=task.patient_id,
            created_by_id=task.created_by_id,
            completed_by_id=task.completed_by_id,
            completed_at=task.completed_at,
            cancelled_by_id=task.cancelled_by_id,
            cancelled_at=task.cancelled_at,
        )

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            name=self.name,
            patient_id=self.patient_id,
            created_by_id=self.created_by_id,
            completed=self.completed,
            cancelled=self.cancelled,
            completed_by_id=self.completed_by_id,
            completed_at=self.completed_at,
            cancelled_by_id=self.cancelled_by_id,
            cancelled_at=self.cancelled_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
