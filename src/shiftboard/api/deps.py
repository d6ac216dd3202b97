"""FastAPI dependency providers.

The Redis store lives on ``app.state`` (built by the application factory);
repositories are cheap wrappers around it and are created per request.
"""

from typing import Annotated, Optional

from fastapi import Cookie, Depends, Request

from shiftboard.adapters.db.redis.repositories.patient_repository import (
    RedisPatientRepository,
)
from shiftboard.adapters.db.redis.repositories.session_repository import (
    RedisSessionRepository,
)
from shiftboard.adapters.db.redis.repositories.task_repository import (
    RedisTaskRepository,
)
from shiftboard.adapters.db.redis.repositories.user_repository import (
    RedisUserRepository,
)
from shiftboard.adapters.db.redis.store import RedisStore
from shiftboard.core.config import Settings
from shiftboard.domain.entities.user import User
from shiftboard.domain.errors import NotAuthenticatedError

USER_COOKIE = "userId"


def get_store(request: Request) -> RedisStore:
    """Get the store bound to the running application."""
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
StoreDep = Annotated[RedisStore, Depends(get_store)]


def get_user_repository(store: StoreDep) -> RedisUserRepository:
    return RedisUserRepository(store)


def get_task_repository(store: StoreDep) -> RedisTaskRepository:
    return RedisTaskRepository(store)


def get_patient_repository(
    store: StoreDep,
    settings: SettingsDep,
    task_repo: Annotated[RedisTaskRepository, Depends(get_task_repository)],
) -> RedisPatientRepository:
    return RedisPatientRepository(
        store, task_repo, default_tasks=settings.tracker.default_tasks
    )


def get_session_repository(
    store: StoreDep,
    user_repo: Annotated[RedisUserRepository, Depends(get_user_repository)],
    patient_repo: Annotated[RedisPatientRepository, Depends(get_patient_repository)],
) -> RedisSessionRepository:
    return RedisSessionRepository(store, user_repo, patient_repo)


# Dependency annotations for FastAPI
UserRepositoryDep = Annotated[RedisUserRepository, Depends(get_user_repository)]
TaskRepositoryDep = Annotated[RedisTaskRepository, Depends(get_task_repository)]
PatientRepositoryDep = Annotated[
    RedisPatientRepository, Depends(get_patient_repository)
]
SessionRepositoryDep = Annotated[
    RedisSessionRepository, Depends(get_session_repository)
]


async def get_current_user(
    user_repo: UserRepositoryDep,
    cookie_user_id: Annotated[Optional[str], Cookie(alias=USER_COOKIE)] = None,
) -> User:
    """Resolve the caller from the ``userId`` cookie.

    Named apart from ``user_id`` so it never binds to a path parameter.
    """
    user = await user_repo.find_by_id(cookie_user_id) if cookie_user_id else None
    if not user:
        raise NotAuthenticatedError()
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]
