"""End Session use case."""

from ...domain.errors import SessionNotFoundError
from ..ports.repositories.session_repo import SessionRepository


class EndSessionUseCase:
    """Use case for ending (destroying) a session. Creator only."""

    def __init__(self, session_repository: SessionRepository):
        self._session_repository = session_repository

    async def execute(self, session_id: str, requester_id: str) -> None:
        ended = await self._session_repository.end(session_id, requester_id)
        if not ended:
            raise SessionNotFoundError(session_id)
