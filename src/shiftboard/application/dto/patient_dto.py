"""Patient and task DTOs for API communication."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .session_dto import UserSummaryDTO


@dataclass
class RegisterPatientRequest:
    """Request DTO for patient registration."""

    tc_no: str
    session_id: str
    user_id: str
    name: Optional[str] = None


@dataclass
class RegisterPatientResponse:
    """Response DTO for patient registration."""

    patient_id: str
    task_ids: List[str]
    message: str


@dataclass
class AddTaskRequest:
    patient_id: str
    task_name: str
    user_id: str


@dataclass
class TaskActionRequest:
    """Request DTO shared by toggle and cancel."""

    task_id: str
    user_id: str


@dataclass
class CompletePatientRequest:
    patient_id: str
    user_id: str


@dataclass
class ListPatientsRequest:
    """Without ``session_id`` every patient in the store is listed."""

    user_id: str
    session_id: Optional[str] = None


@dataclass
class TaskDTO:
    id: str
    name: str
    completed: bool
    cancelled: bool
    patient_id: str
    created_at: datetime
    updated_at: datetime
    created_by: UserSummaryDTO
    completed_by: Optional[UserSummaryDTO] = None
    completed_at: Optional[datetime] = None
    cancelled_by: Optional[UserSummaryDTO] = None
    cancelled_at: Optional[datetime] = None


@dataclass
class PatientBoardItemDTO:
    """DTO for one row of the patient board."""

    id: str
    tc_no: str
    name: Optional[str]
    session_id: str
    created_at: datetime
    updated_at: datetime
    completed: bool
    completed_at: Optional[datetime]
    completed_by: Optional[UserSummaryDTO]
    created_by: UserSummaryDTO
    incomplete_tasks_count: int
    tasks: List[TaskDTO] = field(default_factory=list)
