"""Session-related API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Query, status

from shiftboard.application.dto.session_dto import (
    CreateSessionRequest as CreateSessionDTO,
    JoinSessionRequest as JoinSessionDTO,
    SessionUserRequest,
)
from shiftboard.application.use_cases.create_session import CreateSessionUseCase
from shiftboard.application.use_cases.end_session import EndSessionUseCase
from shiftboard.application.use_cases.join_session import JoinSessionUseCase
from shiftboard.application.use_cases.list_sessions import ListSessionsUseCase
from shiftboard.application.use_cases.manage_session_users import (
    ManageSessionUsersUseCase,
)
from shiftboard.domain.errors import NotParticipantError

from ..deps import CurrentUserDep, SessionRepositoryDep, UserRepositoryDep
from ..schemas.session import (
    AllowUserRequest,
    CreateAndAllowUserRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    ErrorResponse,
    JoinSessionResponse,
    MessageResponse,
    SessionBriefSchema,
    SessionSchema,
    UserSchema,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)

CREATOR_ONLY_RESPONSES = {
    403: {"model": ErrorResponse, "description": "Only the creator may do this"},
    404: {"model": ErrorResponse, "description": "Session not found"},
}


@router.get("", response_model=List[SessionSchema])
async def list_sessions(current_user: CurrentUserDep, session_repo: SessionRepositoryDep):
    """All sessions with creator and participants, newest first."""
    sessions = await ListSessionsUseCase(session_repo).execute()
    return [SessionSchema.model_validate(session) for session in sessions]


@router.post(
    "",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse, "description": "Invalid session name"}},
)
async def create_session(
    request: CreateSessionRequest,
    current_user: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    """
    Open a session. The caller becomes its creator and first participant,
    leaving any session they were in.
    """
    use_case = CreateSessionUseCase(session_repo, user_repo)
    result = await use_case.execute(
        CreateSessionDTO(
            name=request.name,
            creator_id=current_user.id,
            allowed_user_ids=request.allowed_user_ids,
            new_usernames=request.new_usernames,
        )
    )
    return CreateSessionResponse(
        session_id=result.session_id,
        allowed_user_ids=result.allowed_user_ids,
        message=result.message,
    )


@router.get("/mine", response_model=List[SessionBriefSchema])
async def my_sessions(current_user: CurrentUserDep, session_repo: SessionRepositoryDep):
    sessions = await session_repo.find_user_sessions(current_user.id)
    return [SessionBriefSchema.model_validate(session) for session in sessions]


@router.get(
    "/{session_id}",
    response_model=SessionSchema,
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session(
    session_id: str, current_user: CurrentUserDep, session_repo: SessionRepositoryDep
):
    session = await ListSessionsUseCase(session_repo).get(session_id)
    return SessionSchema.model_validate(session)


@router.post(
    "/{session_id}/join",
    response_model=JoinSessionResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not on the allowed list"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {
            "model": ErrorResponse,
            "description": "Already a participant or in another session",
        },
    },
)
async def join_session(
    session_id: str,
    current_user: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    switch: bool = Query(
        False, description="Leave the current session instead of failing"
    ),
):
    """Join a session; ``switch`` moves the caller out of their current one."""
    result = await JoinSessionUseCase(session_repo).execute(
        JoinSessionDTO(
            session_id=session_id, user_id=current_user.id, switch=switch
        )
    )
    return JoinSessionResponse(
        session_id=result.session_id,
        participant_id=result.participant_id,
        left_session_id=result.left_session_id,
        message=result.message,
    )


@router.post(
    "/{session_id}/leave",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse, "description": "Not a participant"}},
)
async def leave_session(
    session_id: str, current_user: CurrentUserDep, session_repo: SessionRepositoryDep
):
    if not await session_repo.leave(current_user.id, session_id):
        raise NotParticipantError(session_id, current_user.id)
    return MessageResponse(message="Left session")


@router.post(
    "/{session_id}/end",
    response_model=MessageResponse,
    responses=CREATOR_ONLY_RESPONSES,
)
async def end_session(
    session_id: str, current_user: CurrentUserDep, session_repo: SessionRepositoryDep
):
    """End a session, deleting its participants, patients and tasks."""
    await EndSessionUseCase(session_repo).execute(session_id, current_user.id)
    return MessageResponse(message="Session ended")


@router.post(
    "/{session_id}/allowed-users",
    response_model=SessionBriefSchema,
    responses=CREATOR_ONLY_RESPONSES,
)
async def add_allowed_user(
    session_id: str,
    request: AllowUserRequest,
    current_user: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    session = await ManageSessionUsersUseCase(session_repo, user_repo).add_user(
        SessionUserRequest(
            session_id=session_id,
            requester_id=current_user.id,
            user_id=request.user_id,
        )
    )
    return SessionBriefSchema.model_validate(session)


@router.delete(
    "/{session_id}/allowed-users/{user_id}",
    response_model=SessionBriefSchema,
    responses=CREATOR_ONLY_RESPONSES,
)
async def remove_allowed_user(
    session_id: str,
    user_id: str,
    current_user: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    """Remove a user from the allowed list; they are evicted if present."""
    session = await ManageSessionUsersUseCase(session_repo, user_repo).remove_user(
        SessionUserRequest(
            session_id=session_id, requester_id=current_user.id, user_id=user_id
        )
    )
    return SessionBriefSchema.model_validate(session)


@router.post(
    "/{session_id}/allowed-users/new",
    response_model=UserSchema,
    status_code=status.HTTP_201_CREATED,
    responses=CREATOR_ONLY_RESPONSES,
)
async def create_and_allow_user(
    session_id: str,
    request: CreateAndAllowUserRequest,
    current_user: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    user = await ManageSessionUsersUseCase(session_repo, user_repo).create_user_and_add(
        SessionUserRequest(
            session_id=session_id,
            requester_id=current_user.id,
            username=request.username,
        )
    )
    return UserSchema.model_validate(user)
