"""Create Session use case."""

import logging
from typing import List

from ...domain.entities.session import Session
from ...domain.entities.user import MIN_USERNAME_LENGTH
from ..dto.session_dto import CreateSessionRequest, CreateSessionResponse
from ..ports.repositories.session_repo import SessionRepository
from ..ports.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class CreateSessionUseCase:
    """Use case for opening a session, optionally restricted to some users."""

    def __init__(
        self, session_repository: SessionRepository, user_repository: UserRepository
    ):
        self._session_repository = session_repository
        self._user_repository = user_repository

    async def execute(self, request: CreateSessionRequest) -> CreateSessionResponse:
        """Execute the create session use case."""
        name = Session.validate_name(request.name)

        # Usernames shorter than the minimum are silently ignored
        new_user_ids: List[str] = []
        for username in request.new_usernames:
            if not username or len(username.strip()) < MIN_USERNAME_LENGTH:
                continue
            user, is_new = await self._user_repository.find_or_create(username)
            if is_new:
                logger.info("Created user %s while opening session %r", user.id, name)
            new_user_ids.append(user.id)

        allowed = [
            user_id for user_id in [*request.allowed_user_ids, *new_user_ids] if user_id
        ]

        session = await self._session_repository.create(
            name, request.creator_id, allowed or None
        )

        return CreateSessionResponse(
            session_id=session.id,
            allowed_user_ids=session.allowed_user_ids,
            message="Session created",
        )
