"""
Pydantic schemas for patient- and task-related API endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator

from .session import UserSchema


class RegisterPatientRequest(BaseModel):
    """Request schema for patient registration."""

    tc_no: str = Field(..., description="11-digit TC number")
    name: Optional[str] = Field(None, max_length=120, description="Patient name")

    @validator("name")
    def validate_name(cls, v):
        if v is None:
            return v
        return v.strip() or None


class RegisterPatientResponse(BaseModel):
    patient_id: str
    task_ids: List[str]
    message: str


class AddTaskRequest(BaseModel):
    task_name: str = Field(..., max_length=200, description="Task name")


class TaskSchema(BaseModel):
    """Response schema for a task with resolved users."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    completed: bool
    cancelled: bool
    patient_id: str
    created_at: datetime
    updated_at: datetime
    created_by: Optional[UserSchema] = None
    completed_by: Optional[UserSchema] = None
    completed_at: Optional[datetime] = None
    cancelled_by: Optional[UserSchema] = None
    cancelled_at: Optional[datetime] = None


class TaskStateSchema(BaseModel):
    """Response schema for a task right after a mutation (user IDs only)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    patient_id: str
    completed: bool
    cancelled: bool
    created_by_id: str
    completed_by_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    updated_at: datetime


class PatientStateSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tc_no: str
    name: Optional[str] = None
    session_id: str
    completed: bool
    completed_at: Optional[datetime] = None
    completed_by_id: Optional[str] = None
    updated_at: datetime


class PatientBoardItemSchema(BaseModel):
    """Response schema for one row of the patient board."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tc_no: str
    name: Optional[str] = None
    session_id: str
    created_at: datetime
    updated_at: datetime
    completed: bool
    completed_at: Optional[datetime] = None
    completed_by: Optional[UserSchema] = None
    created_by: Optional[UserSchema] = None
    incomplete_tasks_count: int
    tasks: List[TaskSchema] = Field(default_factory=list)
