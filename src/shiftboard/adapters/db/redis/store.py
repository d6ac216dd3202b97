"""
Thin TTL-aware wrapper around the asyncio Redis client.

Every write goes out with the configured expiry (``SET ... EX`` for strings,
an ``EXPIRE`` after each structure write), so records and their indices share
the same horizon and are renewed on every write. Each call is an independent
round trip; nothing here is transactional.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Type, TypeVar

from redis.asyncio import Redis

from .locks import KeyedLock
from .models import RedisRecord

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RedisRecord)

DEFAULT_TTL_SECONDS = 60 * 60 * 24


class RedisStore:
    """Record, index and membership primitives used by the repositories."""

    def __init__(
        self,
        client: Redis,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        locks: Optional[KeyedLock] = None,
    ) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.locks = locks or KeyedLock()

    def lock(self, key: str):
        """Serialize read-modify-write sequences on ``key`` within this process."""
        return self.locks.hold(key)

    # Primary records

    async def get_record(self, key: str, model: Type[R]) -> Optional[R]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        return model.loads(raw)

    async def get_records(self, keys: Sequence[str], model: Type[R]) -> List[Optional[R]]:
        """Fetch several records in one round trip; misses come back as None."""
        if not keys:
            return []
        raws = await self.client.mget(list(keys))
        return [model.loads(raw) if raw is not None else None for raw in raws]

    async def put_record(self, key: str, record: RedisRecord) -> None:
        await self.client.set(key, record.dumps(), ex=self.ttl_seconds)

    # Single-value indices

    async def get_value(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def put_value(self, key: str, value: str) -> None:
        await self.client.set(key, value, ex=self.ttl_seconds)

    # Sorted sets

    async def add_scored(self, key: str, member: str, score: float) -> None:
        await self.client.zadd(key, {member: score})
        await self.client.expire(key, self.ttl_seconds)

    async def range_scored(self, key: str, newest_first: bool = True) -> List[str]:
        if newest_first:
            return await self.client.zrevrange(key, 0, -1)
        return await self.client.zrange(key, 0, -1)

    async def remove_scored(self, key: str, *members: str) -> None:
        if members:
            await self.client.zrem(key, *members)

    # Lists

    async def append(self, key: str, member: str) -> None:
        await self.client.rpush(key, member)
        await self.client.expire(key, self.ttl_seconds)

    async def read_list(self, key: str) -> List[str]:
        return await self.client.lrange(key, 0, -1)

    # Unordered sets

    async def add_member(self, key: str, member: str) -> None:
        await self.client.sadd(key, member)
        await self.client.expire(key, self.ttl_seconds)

    async def members(self, key: str) -> List[str]:
        return sorted(await self.client.smembers(key))

    async def remove_member(self, key: str, member: str) -> None:
        await self.client.srem(key, member)

    # Keys

    async def exists(self, key: str) -> bool:
        return await self.client.exists(key) == 1

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def renew(self, keys: Iterable[str]) -> None:
        """Push the expiry of existing keys back to a full TTL."""
        for key in keys:
            await self.client.expire(key, self.ttl_seconds)
