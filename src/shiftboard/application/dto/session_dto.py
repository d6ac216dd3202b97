"""Session DTOs exchanged between the API layer and the use cases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class UserSummaryDTO:
    """DTO for the public part of a user."""

    id: str
    username: str


@dataclass
class LoginResponse:
    user_id: str
    username: str
    is_new_user: bool


@dataclass
class CreateSessionRequest:
    """Request DTO for opening a session.

    ``new_usernames`` are created (or looked up) and added to the allowed list.
    """

    name: str
    creator_id: str
    allowed_user_ids: List[str] = field(default_factory=list)
    new_usernames: List[str] = field(default_factory=list)


@dataclass
class CreateSessionResponse:
    session_id: str
    allowed_user_ids: List[str]
    message: str


@dataclass
class JoinSessionRequest:
    """Request DTO for joining a session.

    With ``switch`` a user already in another session moves over instead of
    being rejected.
    """

    session_id: str
    user_id: str
    switch: bool = False


@dataclass
class JoinSessionResponse:
    session_id: str
    participant_id: str
    left_session_id: Optional[str]
    message: str


@dataclass
class SessionUserRequest:
    """Request DTO for creator-only allowed-user management."""

    session_id: str
    requester_id: str
    user_id: Optional[str] = None
    username: Optional[str] = None


@dataclass
class ParticipantDTO:
    id: str
    user_id: str
    session_id: str
    joined_at: datetime
    user: UserSummaryDTO


@dataclass
class SessionSummaryDTO:
    """DTO for a session with its creator and participants."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    created_by_id: str
    allowed_user_ids: List[str]
    created_by: Optional[UserSummaryDTO]
    participants: List[ParticipantDTO] = field(default_factory=list)
