"""Login-or-register use case: usernames are the only credential."""

from ...domain.entities.user import User
from ..dto.session_dto import LoginResponse
from ..ports.repositories.user_repo import UserRepository


class LoginOrRegisterUseCase:
    """Resolve a username to a user, creating it on first sight."""

    def __init__(self, user_repository: UserRepository):
        self._user_repository = user_repository

    async def execute(self, username: str) -> LoginResponse:
        cleaned = User.validate_username(username)
        user, is_new = await self._user_repository.find_or_create(cleaned)
        return LoginResponse(user_id=user.id, username=user.username, is_new_user=is_new)
