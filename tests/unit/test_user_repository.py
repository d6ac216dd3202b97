"""Unit tests for RedisUserRepository."""

import asyncio

from shiftboard.adapters.db.redis import keys


class TestCreateAndFind:
    async def test_create_then_find_by_username(self, user_repo):
        user = await user_repo.create("ayse")

        found = await user_repo.find_by_username("ayse")

        assert found is not None
        assert found.id == user.id
        assert found.username == "ayse"

    async def test_create_writes_indices(self, user_repo, redis_client):
        user = await user_repo.create("ayse")

        assert await redis_client.get(keys.user_by_username("ayse")) == user.id
        assert await redis_client.zscore(keys.users_all(), user.id) is not None

    async def test_missing_user(self, user_repo):
        assert await user_repo.find_by_id("user_0_000000000") is None
        assert await user_repo.find_by_username("ghost") is None

    async def test_stale_username_index_resolves_to_none(self, user_repo, redis_client):
        user = await user_repo.create("ayse")
        await redis_client.delete(keys.user(user.id))

        assert await user_repo.find_by_username("ayse") is None

    async def test_find_all_newest_first(self, user_repo):
        first = await user_repo.create("ayse")
        await asyncio.sleep(0.002)
        second = await user_repo.create("mehmet")

        assert [u.id for u in await user_repo.find_all()] == [second.id, first.id]


class TestFindOrCreate:
    async def test_sequential_calls_return_same_user(self, user_repo):
        user, is_new = await user_repo.find_or_create("ayse")
        again, is_new_again = await user_repo.find_or_create(" ayse ")

        assert is_new is True
        assert is_new_again is False
        assert again.id == user.id

    async def test_concurrent_calls_create_one_user(self, user_repo):
        results = await asyncio.gather(
            *(user_repo.find_or_create("ayse") for _ in range(5))
        )

        assert len({user.id for user, _ in results}) == 1
        assert sum(1 for _, is_new in results if is_new) == 1
        assert len(await user_repo.find_all()) == 1
