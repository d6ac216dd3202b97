"""List Sessions use case: the session overview with creators and participants."""

from typing import List, Optional

from ...domain.entities.aggregates import SessionWithParticipants
from ...domain.entities.user import User
from ...domain.errors import SessionNotFoundError
from ..dto.session_dto import ParticipantDTO, SessionSummaryDTO, UserSummaryDTO
from ..ports.repositories.session_repo import SessionRepository


def _user_summary(user: Optional[User]) -> Optional[UserSummaryDTO]:
    if not user:
        return None
    return UserSummaryDTO(id=user.id, username=user.username)


def to_session_summary(view: SessionWithParticipants) -> SessionSummaryDTO:
    session = view.session
    return SessionSummaryDTO(
        id=session.id,
        name=session.name,
        created_at=session.created_at,
        updated_at=session.updated_at,
        created_by_id=session.created_by_id,
        allowed_user_ids=list(session.allowed_user_ids),
        created_by=_user_summary(view.created_by),
        participants=[
            ParticipantDTO(
                id=item.participant.id,
                user_id=item.participant.user_id,
                session_id=item.participant.session_id,
                joined_at=item.participant.joined_at,
                user=UserSummaryDTO(id=item.user.id, username=item.user.username),
            )
            for item in view.participants
        ],
    )


class ListSessionsUseCase:
    """Use case for the session overview."""

    def __init__(self, session_repository: SessionRepository):
        self._session_repository = session_repository

    async def execute(self) -> List[SessionSummaryDTO]:
        """All live sessions, newest first."""
        views = await self._session_repository.get_all_with_participants()
        return [to_session_summary(view) for view in views]

    async def get(self, session_id: str) -> SessionSummaryDTO:
        view = await self._session_repository.get_with_participants(session_id)
        if not view:
            raise SessionNotFoundError(session_id)
        return to_session_summary(view)
