"""
Pydantic schemas for user- and session-related API endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator


class LoginRequest(BaseModel):
    """Request schema for login-or-register."""

    username: str = Field(..., min_length=1, max_length=64, description="Username")

    @validator("username")
    def validate_username(cls, v):
        if not v or not v.strip():
            raise ValueError("Username cannot be empty")
        return v.strip()


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="User ID")
    username: str = Field(..., description="Username")


class LoginResponse(BaseModel):
    user_id: str
    username: str
    is_new_user: bool


class CreateSessionRequest(BaseModel):
    """Request schema for opening a session."""

    name: str = Field(..., max_length=120, description="Session name")
    allowed_user_ids: List[str] = Field(
        default_factory=list, description="Users allowed to join; empty means anyone"
    )
    new_usernames: List[str] = Field(
        default_factory=list, description="Users to create and allow"
    )


class CreateSessionResponse(BaseModel):
    session_id: str
    allowed_user_ids: List[str]
    message: str


class JoinSessionResponse(BaseModel):
    session_id: str
    participant_id: str
    left_session_id: Optional[str] = None
    message: str


class AllowUserRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="User to allow")


class CreateAndAllowUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, description="Username")


class ParticipantSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    session_id: str
    joined_at: datetime
    user: UserSchema


class SessionSchema(BaseModel):
    """Response schema for a session with creator and participants."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    created_by_id: str
    allowed_user_ids: List[str] = Field(default_factory=list)
    created_by: Optional[UserSchema] = None
    participants: List[ParticipantSchema] = Field(default_factory=list)


class SessionBriefSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    created_by_id: str
    allowed_user_ids: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: dict = Field(default_factory=dict, description="Additional error details")
