"""Allowed-user management for restricted sessions."""

from ...domain.entities.session import Session
from ...domain.entities.user import User
from ...domain.errors import (
    SessionNotFoundError,
    SessionPermissionError,
    UserNotFoundError,
)
from ..dto.session_dto import SessionUserRequest
from ..ports.repositories.session_repo import SessionRepository
from ..ports.repositories.user_repo import UserRepository


class ManageSessionUsersUseCase:
    """Creator-only edits of a session's allowed-user list."""

    def __init__(
        self, session_repository: SessionRepository, user_repository: UserRepository
    ):
        self._session_repository = session_repository
        self._user_repository = user_repository

    async def add_user(self, request: SessionUserRequest) -> Session:
        """Allow an existing user into the session."""
        if not request.user_id or not await self._user_repository.find_by_id(
            request.user_id
        ):
            raise UserNotFoundError(request.user_id or "")

        session = await self._session_repository.add_allowed_user(
            request.session_id, request.user_id, request.requester_id
        )
        if not session:
            raise SessionNotFoundError(request.session_id)
        return session

    async def remove_user(self, request: SessionUserRequest) -> Session:
        """Remove a user from the allowed list, evicting them if present."""
        session = await self._session_repository.remove_allowed_user(
            request.session_id, request.user_id or "", request.requester_id
        )
        if not session:
            raise SessionNotFoundError(request.session_id)
        return session

    async def create_user_and_add(self, request: SessionUserRequest) -> User:
        """Find or create a user by name and allow them into the session.

        The creator check runs before any user is created.
        """
        username = User.validate_username(request.username or "")

        session = await self._session_repository.find_by_id(request.session_id)
        if not session:
            raise SessionNotFoundError(request.session_id)
        if not session.is_creator(request.requester_id):
            raise SessionPermissionError(request.session_id, "add users")

        user, _ = await self._user_repository.find_or_create(username)
        await self._session_repository.add_allowed_user(
            request.session_id, user.id, request.requester_id
        )
        return user
