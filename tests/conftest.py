"""
Shared pytest fixtures.

Every test gets its own in-memory Redis (fakeredis) so keys never leak
between tests.
"""

from contextlib import AsyncExitStack

import pytest
from fakeredis import FakeServer, aioredis
from httpx import ASGITransport, AsyncClient

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
from shiftboard.app import create_app
from shiftboard.core.config import Settings

DEFAULT_TASKS = ["anamnez", "3tup kan", "dosya girişi"]
TEST_TTL = 86400


@pytest.fixture
async def redis_client():
    client = aioredis.FakeRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return RedisStore(redis_client, ttl_seconds=TEST_TTL)


@pytest.fixture
def user_repo(store):
    return RedisUserRepository(store)


@pytest.fixture
def task_repo(store):
    return RedisTaskRepository(store)


@pytest.fixture
def patient_repo(store, task_repo):
    return RedisPatientRepository(store, task_repo, default_tasks=DEFAULT_TASKS)


@pytest.fixture
def session_repo(store, user_repo, patient_repo):
    return RedisSessionRepository(store, user_repo, patient_repo)


@pytest.fixture
async def u1(user_repo):
    return await user_repo.create("u1")


@pytest.fixture
async def u2(user_repo):
    return await user_repo.create("u2")


@pytest.fixture
async def u3(user_repo):
    return await user_repo.create("u3")


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def app(redis_client):
    settings = Settings(app_env="testing")
    return create_app(settings=settings, redis_client=redis_client)


@pytest.fixture
async def client_factory(app):
    """Build HTTP clients against the app; each keeps its own cookie jar.

    ``await client_factory("alice")`` returns a client already logged in.
    """
    async with AsyncExitStack() as stack:

        async def make(username=None):
            client = await stack.enter_async_context(
                AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
            )
            if username:
                response = await client.post("/auth/login", json={"username": username})
                assert response.status_code == 200, response.text
            return client

        yield make
