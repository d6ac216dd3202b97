"""Login, logout and user listing endpoints.

There are no passwords: logging in with an unknown username registers it,
and the caller is identified by the ``userId`` cookie afterwards.
"""

import logging
from typing import List

from fastapi import APIRouter, Response, status

from shiftboard.application.use_cases.login_or_register import LoginOrRegisterUseCase

from ..deps import USER_COOKIE, CurrentUserDep, SettingsDep, UserRepositoryDep
from ..schemas.session import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UserSchema,
)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse, "description": "Invalid username"}},
)
async def login(
    request: LoginRequest,
    response: Response,
    user_repo: UserRepositoryDep,
    settings: SettingsDep,
):
    """Find or create the user and set the identity cookie."""
    result = await LoginOrRegisterUseCase(user_repo).execute(request.username)

    response.set_cookie(
        key=USER_COOKIE,
        value=result.user_id,
        max_age=settings.tracker.record_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    if result.is_new_user:
        logger.info("Registered new user %s on login", result.user_id)

    return LoginResponse(
        user_id=result.user_id,
        username=result.username,
        is_new_user=result.is_new_user,
    )


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(USER_COOKIE)
    return MessageResponse(message="Logged out")


@router.get("/auth/me", response_model=UserSchema)
async def me(current_user: CurrentUserDep):
    return UserSchema.model_validate(current_user)


@router.get("/users", response_model=List[UserSchema])
async def list_users(current_user: CurrentUserDep, user_repo: UserRepositoryDep):
    """Users available for the allowed-user picker, newest first."""
    users = await user_repo.find_all()
    return [UserSchema.model_validate(user) for user in users]
