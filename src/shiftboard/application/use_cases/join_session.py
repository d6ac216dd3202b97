"""Join Session use case."""

from ...domain.errors import (
    ActiveSessionConflictError,
    AlreadyParticipantError,
    SessionAccessDeniedError,
    SessionNotFoundError,
)
from ..dto.session_dto import JoinSessionRequest, JoinSessionResponse
from ..ports.repositories.session_repo import SessionRepository


class JoinSessionUseCase:
    """Use case for joining a session.

    A user who is already in another session is rejected unless the request
    asks to switch, in which case the repository moves the membership.
    """

    def __init__(self, session_repository: SessionRepository):
        self._session_repository = session_repository

    async def execute(self, request: JoinSessionRequest) -> JoinSessionResponse:
        """Execute the join session use case."""
        eligibility = await self._session_repository.can_join(
            request.user_id, request.session_id
        )

        active = None
        if not eligibility.can_join:
            code = eligibility.error_code
            if code == "SESSION_NOT_FOUND":
                raise SessionNotFoundError(request.session_id)
            if code == "ALREADY_PARTICIPANT":
                raise AlreadyParticipantError(request.session_id, request.user_id)
            if code == "SESSION_ACCESS_DENIED":
                raise SessionAccessDeniedError(request.session_id, request.user_id)

            active = await self._session_repository.find_user_active_session(
                request.user_id
            )
            if not request.switch:
                raise ActiveSessionConflictError(
                    active.id if active else "", active.name if active else ""
                )

        # join() re-checks the allowed list, so a switch cannot bypass it
        participant = await self._session_repository.join(
            request.user_id, request.session_id
        )

        return JoinSessionResponse(
            session_id=request.session_id,
            participant_id=participant.id,
            left_session_id=active.id if active else None,
            message="Joined session",
        )
